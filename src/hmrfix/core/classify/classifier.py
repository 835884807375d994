"""Overlay text classification.

Turns the raw text of a dev-server error overlay into typed error records.
Rules are grouped by category and evaluated in order; each category emits at
most one record and categories fire independently of each other.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from ...api.dto import ErrorRecord, ErrorType

IMPORT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r'Failed to resolve import "([^"]+)"'),
    re.compile(r'Could not resolve "([^"]+)"'),
    re.compile(r"Module not found: (?:Error: )?Can't resolve '([^']+)'"),
    re.compile(r"Cannot find module '([^']+)'"),
    re.compile(r"Cannot resolve module ['\"]([^'\"]+)['\"]"),
)

SYNTAX_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"Transform failed with \d+ error"),
    re.compile(r"SyntaxError:"),
    re.compile(r"Unexpected token"),
    re.compile(r"Parse ?error", re.IGNORECASE),
)

ABORTED_MARKER = "net::ERR_ABORTED"
# A bare 500 also appears as a line number in stack frames (main.js:500:11)
SERVER_ERROR_PATTERN = re.compile(
    r"\b500\s*\(Internal Server Error\)"
    r"|\bstatus(?: code)?:? 500\b"
    r"|\bHTTP(?:/[\d.]+)? 500\b"
    r"|Internal Server Error"
)
NODE_MODULES_PATTERN = re.compile(r"/node_modules/((?:@[^/\s]+/)?[^/\s?\"']+)")

SYNTAX_MESSAGE = "Syntax error detected"


def normalize_package(specifier: str) -> str:
    """Reduce an import specifier to the installable package name.

    ``@scope/pkg/sub/path`` -> ``@scope/pkg``; ``lodash/fp`` -> ``lodash``.
    """
    parts = specifier.split("/")
    if specifier.startswith("@"):
        return "/".join(parts[:2]) if len(parts) >= 2 else specifier
    return parts[0]


def describes_unresolved_import(message: str) -> bool:
    return any(p.search(message) for p in IMPORT_PATTERNS)


def _import_error(text: str) -> ErrorRecord | None:
    for pattern in IMPORT_PATTERNS:
        m = pattern.search(text)
        if not m:
            continue
        specifier = m.group(1)
        if specifier.startswith("."):
            # Relative imports are project files, nothing to install
            return None
        return ErrorRecord(
            type=ErrorType.NPM_MISSING,
            message=m.group(0),
            package=normalize_package(specifier),
        )
    return None


def _syntax_error(text: str) -> ErrorRecord | None:
    if any(p.search(text) for p in SYNTAX_PATTERNS):
        return ErrorRecord(type=ErrorType.SYNTAX_ERROR, message=SYNTAX_MESSAGE)
    return None


def _network_inference(text: str) -> ErrorRecord | None:
    # Best-effort: an aborted request or a 500 on a dependency file usually
    # means the package is missing, but unrelated failures can match too.
    if ABORTED_MARKER not in text and not SERVER_ERROR_PATTERN.search(text):
        return None
    for m in NODE_MODULES_PATTERN.finditer(text):
        segment = m.group(1)
        if segment.startswith("."):
            continue
        package = normalize_package(segment)
        return ErrorRecord(
            type=ErrorType.NPM_MISSING,
            message=f"Missing package file: {package}",
            package=package,
        )
    return None


@dataclass(frozen=True)
class ClassificationRule:
    name: str
    apply: Callable[[str], ErrorRecord | None]


RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("import", _import_error),
    ClassificationRule("syntax", _syntax_error),
    ClassificationRule("network", _network_inference),
)


def classify(text: str | None, rules: tuple[ClassificationRule, ...] = RULES) -> list[ErrorRecord]:
    """Classify overlay text into zero or more error records, in rule order."""
    if not text:
        return []
    records: list[ErrorRecord] = []
    for rule in rules:
        record = rule.apply(text)
        if record is not None:
            records.append(record)
    return records
