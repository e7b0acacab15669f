"""
Diploma delivery: message composition and mail transports.
"""

# Standard Library
import asyncio
import dataclasses
import html
import json
import logging
import pathlib
import re
import uuid

# PIP3 modules
import requests
import requests.exceptions

# local repo modules
import cert_mailer as cm
import cert_mailer.config
import cert_mailer.errors
import cert_mailer.pipeline


log = logging.getLogger(__name__)

EventDetails = cm.config.EventDetails
DiplomaGenerator = cm.pipeline.DiplomaGenerator
InputError = cm.errors.InputError
DeliveryError = cm.errors.DeliveryError

MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 100
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAILGUN_BASE_URL = "https://api.mailgun.net/v3"
MAILGUN_TIMEOUT = 30


@dataclasses.dataclass(frozen=True)
class DiplomaMessage:
	recipient: str
	subject: str
	html_body: str
	text_body: str
	filename: str


#============================================
def escape_markup(value: str) -> str:
	"""
	Escape text for inclusion in HTML or XML markup.

	Args:
		value: Raw text.

	Returns:
		Text with & < > " ' replaced by entities.
	"""
	return html.escape(value, quote=True)


#============================================
def validate_recipient(name: str, recipient: str) -> tuple[str, str]:
	"""
	Validate and clean a recipient name and address.

	Args:
		name: Recipient name.
		recipient: Email address.

	Returns:
		Tuple of (clean_name, clean_address).
	"""
	clean_name = cm.pipeline.normalize_name(name)
	if not MIN_NAME_LENGTH <= len(clean_name) <= MAX_NAME_LENGTH:
		raise InputError(
			f"Name must be {MIN_NAME_LENGTH}-{MAX_NAME_LENGTH} characters, got {len(clean_name)}"
		)
	clean_address = str(recipient or "").strip().lower()
	if not EMAIL_PATTERN.match(clean_address):
		raise InputError(f"Invalid email address {clean_address!r}")
	return (clean_name, clean_address)


#============================================
def compose_message(name: str, recipient: str, event: EventDetails) -> DiplomaMessage:
	"""
	Build the diploma email for a recipient.

	Args:
		name: Recipient name.
		recipient: Email address.
		event: Event wording.

	Returns:
		DiplomaMessage.
	"""
	clean_name, clean_address = validate_recipient(name, recipient)
	subject = f"{event.subtitle} - {event.subject_title}"
	html_body = (
		f"<p>Hola <strong>{escape_markup(clean_name)}</strong>,</p>\n"
		f"<p>¡Gracias por participar en <strong>{escape_markup(event.body_title)}</strong>!</p>\n"
		"<p>Adjunto encontrarás tu <strong>diploma de participación</strong>.</p>\n"
		f"<p>Saludos,<br>{escape_markup(event.organization)}</p>\n"
	)
	text_body = (
		f"Hola {clean_name},\n"
		f"Gracias por participar en {event.body_title}.\n"
		"Adjunto encontrarás tu diploma de participación.\n"
		f"Saludos, {event.organization}"
	)
	return DiplomaMessage(
		recipient=clean_address,
		subject=subject,
		html_body=html_body,
		text_body=text_body,
		filename=f"Diploma - {clean_name}.pdf",
	)


class DeliveryTransport:
	"""
	Sends a composed message with the diploma attached.
	"""

	def send(self, message: DiplomaMessage, document: bytes) -> str:
		"""
		Deliver a message.

		Args:
			message: Composed message.
			document: PDF bytes to attach.

		Returns:
			Delivery identifier.
		"""
		raise NotImplementedError


class MailgunTransport(DeliveryTransport):
	"""
	Live delivery through the Mailgun messages API.
	"""

	def __init__(
		self,
		api_key: str | None,
		domain: str | None,
		sender: str | None,
		base_url: str = MAILGUN_BASE_URL,
		timeout: float = MAILGUN_TIMEOUT,
	) -> None:
		"""
		Prepare an authenticated session for one sending domain.

		Args:
			api_key: Mailgun private API key.
			domain: Sending domain registered with Mailgun.
			sender: From header, like "Diplomas <no-reply@example.com>".
			base_url: API root, regional endpoints differ.
			timeout: Request timeout in seconds.
		"""
		if not api_key or not domain or not sender:
			raise DeliveryError("Mailgun needs an API key, a domain and a sender")
		self.domain = domain
		self.sender = sender
		self.base_url = base_url.rstrip("/")
		self.timeout = timeout
		self.session = requests.Session()
		self.session.auth = ("api", api_key)

	def send(self, message: DiplomaMessage, document: bytes) -> str:
		"""
		Post the message with the PDF attached.

		Args:
			message: Composed message.
			document: PDF bytes to attach.

		Returns:
			Mailgun message id.
		"""
		url = f"{self.base_url}/{self.domain}/messages"
		data = {
			"from": self.sender,
			"to": message.recipient,
			"subject": message.subject,
			"text": message.text_body,
			"html": message.html_body,
		}
		files = [("attachment", (message.filename, document, "application/pdf"))]
		try:
			response = self.session.post(url, data=data, files=files, timeout=self.timeout)
		except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as err:
			log.error("Unable to reach Mailgun sending to %s: %s", message.recipient, err)
			raise DeliveryError(f"Mailgun unreachable: {err}") from err

		if response.status_code >= 400:
			log.error("Mailgun rejected mail to %s: %s %s", message.recipient, response.status_code, response.text)
			raise DeliveryError(f"Mailgun returned {response.status_code}: {response.text}")
		try:
			delivery_id = response.json()["id"]
		except (ValueError, KeyError) as err:
			raise DeliveryError(f"Unexpected Mailgun reply: {response.text}") from err

		log.info("Mail sent to %s (id %s)", message.recipient, delivery_id)
		return delivery_id

	def __str__(self) -> str:
		return f"{self.base_url}/{self.domain}"


class SimulatedTransport(DeliveryTransport):
	"""
	Writes messages to an outbox directory instead of sending them.
	"""

	def __init__(self, outbox_dir: pathlib.Path) -> None:
		self.outbox_dir = pathlib.Path(outbox_dir)

	def send(self, message: DiplomaMessage, document: bytes) -> str:
		"""
		Save the envelope and the PDF under a fresh id.

		Nothing is left behind in the outbox when a write fails.
		"""
		delivery_id = uuid.uuid4().hex
		pdf_path = self.outbox_dir / f"{delivery_id}.pdf"
		envelope_path = self.outbox_dir / f"{delivery_id}.json"
		envelope = dataclasses.asdict(message)
		envelope["id"] = delivery_id
		envelope["attachment"] = pdf_path.name
		try:
			self.outbox_dir.mkdir(parents=True, exist_ok=True)
			with envelope_path.open("w", encoding="utf-8") as handle:
				json.dump(envelope, handle, indent=2, sort_keys=True, ensure_ascii=False)
			pdf_path.write_bytes(document)
		except OSError as err:
			envelope_path.unlink(missing_ok=True)
			pdf_path.unlink(missing_ok=True)
			raise DeliveryError(f"Cannot write to outbox {self.outbox_dir}: {err}") from err
		log.info("Simulated mail to %s saved as %s", message.recipient, pdf_path)
		return delivery_id


#============================================
async def issue_diploma(
	generator: DiplomaGenerator,
	transport: DeliveryTransport,
	name: str,
	recipient: str,
	event: EventDetails,
) -> str:
	"""
	Validate, generate and deliver a diploma.

	Args:
		generator: Diploma generator.
		transport: Mail transport.
		name: Recipient name.
		recipient: Email address.
		event: Event wording.

	Returns:
		Delivery identifier.
	"""
	message = compose_message(name, recipient, event)
	document = await generator.generate_document(name)
	return await asyncio.to_thread(transport.send, message, document)
