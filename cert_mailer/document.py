"""
Single-page PDF wrapping of the flattened diploma.
"""

# Standard Library
import io
import logging

# PIP3 modules
import pypdf
import pypdf.errors
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import cert_mailer as cm
import cert_mailer.config
import cert_mailer.errors


log = logging.getLogger(__name__)

LayoutSpec = cm.config.LayoutSpec
SerializationError = cm.errors.SerializationError


#============================================
def page_size_points(layout: LayoutSpec) -> tuple[float, float]:
	"""
	Page size of the diploma in points.

	Args:
		layout: Physical page layout.

	Returns:
		Tuple of (width, height).
	"""
	return (
		cm.config.mm_to_points(layout.page_width_mm),
		cm.config.mm_to_points(layout.page_height_mm),
	)


#============================================
def wrap_document(png_bytes: bytes, layout: LayoutSpec, title: str = cm.config.DOCUMENT_TITLE) -> bytes:
	"""
	Place a composite image on a zero-margin page and serialize the PDF.

	The canvas writes into an in-memory buffer that is only returned once
	the document is complete and has been read back as exactly one page.

	Args:
		png_bytes: Lossless composite image.
		layout: Physical page layout.
		title: Document title metadata.

	Returns:
		PDF bytes.
	"""
	page_width, page_height = page_size_points(layout)
	buffer = io.BytesIO()
	try:
		image_reader = reportlab.lib.utils.ImageReader(io.BytesIO(png_bytes))
		pdf = reportlab.pdfgen.canvas.Canvas(
			buffer,
			pagesize=(page_width, page_height),
			invariant=1,
			pageCompression=1,
		)
		pdf.setTitle(title)
		pdf.setCreator("cert_mailer")
		pdf.drawImage(
			image_reader,
			0,
			0,
			width=page_width,
			height=page_height,
			mask=None,
			preserveAspectRatio=False,
			anchor="sw",
		)
		pdf.showPage()
		pdf.save()
	except Exception as err:
		buffer.close()
		raise SerializationError(f"Cannot write diploma PDF: {err}") from err

	data = buffer.getvalue()
	buffer.close()
	verify_single_page(data)
	log.debug("Serialized %d byte PDF (%.2f x %.2f pt)", len(data), page_width, page_height)
	return data


#============================================
def verify_single_page(data: bytes) -> pypdf.PageObject:
	"""
	Read a serialized document back and check it holds one page.

	Args:
		data: PDF bytes.

	Returns:
		The only page.
	"""
	if not data:
		raise SerializationError("PDF writer produced no output")
	try:
		reader = pypdf.PdfReader(io.BytesIO(data))
		page_count = len(reader.pages)
	except (pypdf.errors.PyPdfError, ValueError) as err:
		raise SerializationError(f"Serialized PDF is unreadable: {err}") from err
	if page_count != 1:
		raise SerializationError(f"Expected a single page, found {page_count}")
	return reader.pages[0]
