"""Repository layer: DB access helpers (SQLite).

Keep functions thin and focused, so services avoid SQL strings.
Every helper takes the connection it runs on; nothing here opens one.
"""
from __future__ import annotations
