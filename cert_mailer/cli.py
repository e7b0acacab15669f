"""
CLI entry points for diploma preview and delivery.
"""

# Standard Library
import argparse
import asyncio
import logging
import os
import pathlib
import time

# PIP3 modules
import dotenv

# local repo modules
import cert_mailer as cm
import cert_mailer.config
import cert_mailer.errors
import cert_mailer.mail
import cert_mailer.pipeline


DiplomaConfig = cm.config.DiplomaConfig
EventDetails = cm.config.EventDetails
FitStrategy = cm.config.FitStrategy

DEFAULT_BACKGROUND_PATH = cm.config.DEFAULT_BACKGROUND_PATH
DEFAULT_FONT_PATH = cm.config.DEFAULT_FONT_PATH
DEFAULT_OUTBOX = pathlib.Path("outbox")


#============================================
def build_config(args: argparse.Namespace) -> DiplomaConfig:
	"""
	Build the diploma config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		DiplomaConfig.
	"""
	return DiplomaConfig(
		background_path=pathlib.Path(args.background_path),
		font_path=pathlib.Path(args.font_path),
		fit_strategy=FitStrategy(args.fit_strategy),
	)


#============================================
def build_event(environ: dict[str, str]) -> EventDetails:
	"""
	Build event wording from environment variables.

	Args:
		environ: Environment mapping.

	Returns:
		EventDetails.
	"""
	return EventDetails(
		title=environ.get("EVENT_TITLE") or None,
		subtitle=environ.get("EVENT_SUBTITLE") or cm.config.DEFAULT_SUBTITLE,
		organization=environ.get("ORG_NAME") or cm.config.DEFAULT_ORGANIZATION,
	)


#============================================
def build_transport(args: argparse.Namespace, environ: dict[str, str]) -> cm.mail.DeliveryTransport:
	"""
	Build the mail transport selected on the command line.

	Args:
		args: Parsed argparse namespace.
		environ: Environment mapping.

	Returns:
		DeliveryTransport.
	"""
	if args.transport == "mailgun":
		return cm.mail.MailgunTransport(
			api_key=environ.get("MAILGUN_API_KEY"),
			domain=environ.get("MAILGUN_DOMAIN"),
			sender=environ.get("MAIL_FROM"),
		)
	return cm.mail.SimulatedTransport(pathlib.Path(args.outbox_dir))


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Render a personalized diploma PDF and optionally email it.")
	parser.add_argument("name", help="Recipient name.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=None, help="Write the PDF to this path.")
	output_group.add_argument("-e", "--email", dest="email", default=None, help="Deliver the diploma to this address.")
	output_group.add_argument(
		"-t",
		"--transport",
		dest="transport",
		choices=("simulated", "mailgun"),
		default="simulated",
		help="Mail transport used with --email.",
	)
	output_group.add_argument("--outbox", dest="outbox_dir", default=str(DEFAULT_OUTBOX), help="Simulated transport outbox.")

	layout_group = parser.add_argument_group("Layout")
	layout_group.add_argument("-b", "--background", dest="background_path", default=str(DEFAULT_BACKGROUND_PATH), help="Background PNG.")
	layout_group.add_argument("-f", "--font", dest="font_path", default=str(DEFAULT_FONT_PATH), help="TrueType font file.")
	layout_group.add_argument(
		"-s",
		"--strategy",
		dest="fit_strategy",
		choices=[strategy.value for strategy in FitStrategy],
		default=FitStrategy.ITERATIVE_SHRINK.value,
		help="Text fitting strategy.",
	)

	parser.add_argument("-v", "--verbose", dest="verbose", action="store_true", help="Debug logging.")

	args = parser.parse_args(argv)
	if args.output_path is None and args.email is None:
		parser.error("nothing to do: pass --output and/or --email")
	return args


#============================================
def run_pipeline(args: argparse.Namespace, environ: dict[str, str] | None = None) -> None:
	"""
	Render the diploma and write or deliver it.

	Args:
		args: Parsed argparse namespace.
		environ: Environment mapping, defaults to os.environ.
	"""
	if environ is None:
		environ = dict(os.environ)
	config = build_config(args)
	generator = cm.pipeline.DiplomaGenerator(config)

	print(f"Background: {config.background_path}")
	print(f"Font: {config.font_path}")
	print(f"Strategy: {config.fit_strategy.value}")

	start_time = time.perf_counter()
	if args.output_path:
		document = generator.render_document(args.name)
		output_path = pathlib.Path(args.output_path)
		output_path.write_bytes(document)
		print(f"PDF written: {output_path} ({len(document)} bytes)")

	if args.email:
		event = build_event(environ)
		transport = build_transport(args, environ)
		delivery_id = asyncio.run(
			cm.mail.issue_diploma(generator, transport, args.name, args.email, event)
		)
		print(f"Delivered to {args.email.strip().lower()} via {args.transport}: {delivery_id}")

	print(f"Timing: total={time.perf_counter() - start_time:.2f}s")


#============================================
def main(argv: list[str] | None = None) -> int:
	"""
	Main entry point.

	Settings in a .env file in the working directory are loaded into
	the environment without overriding variables already set.
	"""
	dotenv.load_dotenv(dotenv.find_dotenv(usecwd=True))
	args = parse_args(argv)
	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
	)
	try:
		run_pipeline(args)
	except cm.errors.DiplomaError as err:
		print(f"Error: {err}")
		return 1
	return 0
