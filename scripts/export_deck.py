"""Deck exporter - writes a PPTX from a generated deck JSON file.

Usage:
    python3 scripts/export_deck.py --deck deck.json --template Corporate \\
        --username "Jane" --institution "Acme U" --date 2024-05-01 --output-dir out/
"""

from __future__ import annotations

from slideforge.cli import main

if __name__ == "__main__":
    main()
