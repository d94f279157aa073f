# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the nodeprobe pytest plugin, run in an isolated pytest session."""

import json

import pytest

pytestmark = [
    pytest.mark.gpu_0,
    pytest.mark.pre_merge,
    pytest.mark.unit,
]

# load the plugin by module path whether or not its entry point is installed
PLUGIN_ARGS = ("-p", "no:nodeprobe", "-p", "nodeprobe.pytest_plugin")


def test_config_option_parsed_into_fixture(pytester):
    pytester.makepyfile(
        """
        def test_config(validation_config):
            assert validation_config.expected_gpu_count == 4
            assert validation_config.gpu_count_timeout == 60
        """
    )

    result = pytester.runpytest(
        *PLUGIN_ARGS,
        "--nodeprobe-config",
        json.dumps({"expected_gpu_count": 4, "gpu_count_timeout": 60}),
    )

    result.assert_outcomes(passed=1)


def test_config_option_reads_yaml_file(pytester):
    config_file = pytester.path / "nodeprobe.yaml"
    config_file.write_text("ssh_user: core\n")
    pytester.makepyfile(
        """
        def test_config(validation_config):
            assert validation_config.ssh_user == "core"
        """
    )

    result = pytester.runpytest(*PLUGIN_ARGS, "--nodeprobe-config", str(config_file))

    result.assert_outcomes(passed=1)


def test_default_config_without_option(pytester):
    pytester.makepyfile(
        """
        def test_config(validation_config):
            assert validation_config.expected_gpu_count == 8
        """
    )

    pytester.runpytest(*PLUGIN_ARGS).assert_outcomes(passed=1)


def test_report_sink_raises_soft_failures_at_teardown(pytester):
    pytester.makepyfile(
        """
        def test_soft(report_sink):
            report_sink.log_soft("failed to re-bind GPU")
            report_sink.log_soft("kubelet restarted")
        """
    )

    result = pytester.runpytest(*PLUGIN_ARGS)

    result.assert_outcomes(passed=1, errors=1)
    result.stdout.fnmatch_lines(
        [
            "*2 soft failure(s) recorded*",
            "*- failed to re-bind GPU*",
            "*- kubelet restarted*",
        ]
    )


def test_report_sink_without_soft_failures(pytester):
    pytester.makepyfile(
        """
        def test_clean(report_sink):
            report_sink.log("all good")
        """
    )

    pytester.runpytest(*PLUGIN_ARGS).assert_outcomes(passed=1)


def test_cancel_token_cancelled_at_teardown(pytester):
    pytester.makepyfile(
        """
        tokens = []

        def test_uses_token(cancel_token):
            tokens.append(cancel_token)
            assert not cancel_token.cancelled

        def test_token_released():
            assert tokens[0].cancelled
        """
    )

    pytester.runpytest(*PLUGIN_ARGS).assert_outcomes(passed=2)
