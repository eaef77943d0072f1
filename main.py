#!/usr/bin/env python3
"""CLI for the Nutshell summarization client."""

from nutshell_client.cli import main

if __name__ == "__main__":
    main()
