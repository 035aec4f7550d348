from __future__ import annotations
import os

DEFAULT_TARGET = "all"
MAKEFILE = os.environ.get("SMMAKE_FILE", "Makefile")
JOBS = os.environ.get("SMMAKE_JOBS") or None  # raw string, validated by the CLI
DEBUG = os.environ.get("SMMAKE_DEBUG", "").lower() in ("1", "true", "yes")
