#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Burn placed signature, text, image, date and choice fields into a PDF.
"""

# Standard Library
import sys

# local repo modules
import pdf_field_stamper.cli


if __name__ == "__main__":
	sys.exit(pdf_field_stamper.cli.main())
