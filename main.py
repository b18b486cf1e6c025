#!/usr/bin/env python3
"""
DNS Records Client - Main Entry Point

This is the main entry point for the DNS records client.
It can be run directly or imported as a module.
"""

import sys

from dns_records_client.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
