#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Render a personalized diploma PDF and optionally email it.
"""

import sys

import cert_mailer.cli


if __name__ == "__main__":
	sys.exit(cert_mailer.cli.main())
