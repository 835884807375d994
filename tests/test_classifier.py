"""Tests for overlay text classification."""

from __future__ import annotations

import pytest
from hmrfix.api.dto import ErrorRecord, ErrorType
from hmrfix.core.classify.classifier import (
    RULES,
    SYNTAX_MESSAGE,
    ClassificationRule,
    classify,
    describes_unresolved_import,
    normalize_package,
)


class TestNormalizePackage:
    def test_scoped_package_keeps_scope_and_name(self):
        assert normalize_package("@scope/pkg/sub/path") == "@scope/pkg"

    def test_subpath_import_keeps_first_segment(self):
        assert normalize_package("lodash/fp") == "lodash"

    def test_bare_package(self):
        assert normalize_package("react") == "react"

    def test_lone_scope_is_returned_unchanged(self):
        assert normalize_package("@scope") == "@scope"


class TestImportErrors:
    def test_vite_failed_to_resolve(self):
        text = (
            '[plugin:vite:import-analysis] Failed to resolve import "framer-motion" '
            'from "src/App.jsx". Does the file exist?'
        )
        assert classify(text) == [
            ErrorRecord(
                type=ErrorType.NPM_MISSING,
                message='Failed to resolve import "framer-motion"',
                package="framer-motion",
            )
        ]

    def test_scoped_subpath_is_normalized(self):
        records = classify('Failed to resolve import "@radix-ui/react-icons/dist/x"')
        assert records[0].package == "@radix-ui/react-icons"

    def test_relative_specifier_is_skipped(self):
        assert classify('Failed to resolve import "./components/Header"') == []

    def test_parent_relative_specifier_is_skipped(self):
        assert classify('Failed to resolve import "../utils"') == []

    @pytest.mark.parametrize(
        "text, package",
        [
            ('✘ [ERROR] Could not resolve "date-fns/format"', "date-fns"),
            ("Module not found: Error: Can't resolve 'axios' in '/app/src'", "axios"),
            ("Error: Cannot find module 'zustand/middleware'", "zustand"),
            ("Cannot resolve module \"@tanstack/react-query\"", "@tanstack/react-query"),
        ],
    )
    def test_other_resolution_messages(self, text, package):
        records = classify(text)
        assert len(records) == 1
        assert records[0].type == ErrorType.NPM_MISSING
        assert records[0].package == package

    def test_only_first_matching_pattern_emits(self):
        text = 'Failed to resolve import "a-pkg"\nCould not resolve "b-pkg"'
        records = classify(text)
        assert [r.package for r in records] == ["a-pkg"]

    def test_describes_unresolved_import(self):
        assert describes_unresolved_import('Failed to resolve import "x"')
        assert not describes_unresolved_import("something else broke")


class TestSyntaxErrors:
    @pytest.mark.parametrize(
        "text",
        [
            "Transform failed with 1 error:\n/app/src/App.jsx:3:4: ERROR: Expected",
            "SyntaxError: Unexpected end of input",
            "Unexpected token (12:5)",
            "Parse error @:1:1",
            "[vite] Internal ParseError",
        ],
    )
    def test_syntax_markers(self, text):
        records = classify(text)
        assert records == [ErrorRecord(type=ErrorType.SYNTAX_ERROR, message=SYNTAX_MESSAGE)]
        assert records[0].package is None


class TestNetworkInference:
    def test_aborted_dependency_request(self):
        text = "GET http://localhost:5173/node_modules/chart.js/dist/chart.js net::ERR_ABORTED"
        assert classify(text) == [
            ErrorRecord(
                type=ErrorType.NPM_MISSING,
                message="Missing package file: chart.js",
                package="chart.js",
            )
        ]

    def test_server_error_on_scoped_dependency(self):
        text = "GET /node_modules/@headlessui/react/dist/index.js 500 (Internal Server Error)"
        assert classify(text)[0].package == "@headlessui/react"

    def test_vite_cache_directory_is_skipped(self):
        text = (
            "GET /node_modules/.vite/deps/chunk.js net::ERR_ABORTED\n"
            "GET /node_modules/recharts/es6/index.js net::ERR_ABORTED"
        )
        assert classify(text)[0].package == "recharts"

    def test_dependency_path_without_failure_marker(self):
        assert classify("loaded /node_modules/react/index.js") == []

    def test_failure_marker_without_dependency_path(self):
        assert classify("GET /api/users 500 (Internal Server Error)") == []


class TestClassify:
    def test_empty_and_missing_text(self):
        assert classify(None) == []
        assert classify("") == []

    def test_unmatched_text(self):
        assert classify("Everything compiled fine") == []

    def test_categories_fire_independently_in_order(self):
        text = (
            'Failed to resolve import "lodash/debounce"\n'
            "Transform failed with 2 errors\n"
            "GET /node_modules/dayjs/dayjs.min.js net::ERR_ABORTED"
        )
        records = classify(text)
        assert [r.type for r in records] == [
            ErrorType.NPM_MISSING,
            ErrorType.SYNTAX_ERROR,
            ErrorType.NPM_MISSING,
        ]
        assert records[0].package == "lodash"
        assert records[2].package == "dayjs"

    def test_custom_rule_table(self):
        rule = ClassificationRule(
            "always", lambda text: ErrorRecord(type=ErrorType.UNKNOWN, message=text)
        )
        assert classify("boom", rules=RULES + (rule,)) == [
            ErrorRecord(type=ErrorType.UNKNOWN, message="boom")
        ]


class TestStackFrameLineNumbers:
    def test_line_500_in_dependency_frame_is_not_a_server_error(self):
        text = (
            "Transform failed with 1 error:\n"
            "/home/user/app/src/App.jsx:12:4: ERROR: Expected \";\" but found \"}\"\n"
            "    at failureErrorWithLog "
            "(/home/user/app/node_modules/esbuild/lib/main.js:500:11)"
        )
        assert classify(text) == [
            ErrorRecord(type=ErrorType.SYNTAX_ERROR, message=SYNTAX_MESSAGE)
        ]

    @pytest.mark.parametrize(
        "indicator",
        ["500 (Internal Server Error)", "status code 500", "HTTP/1.1 500", "status: 500"],
    )
    def test_http_500_indicators(self, indicator):
        text = f"GET /node_modules/zod/lib/index.mjs {indicator}"
        assert classify(text)[0].package == "zod"
