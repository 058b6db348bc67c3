"""Tests for launch spec rendering and SDK translation."""

import shlex
from datetime import datetime

import pytest

from docker_updater.managers.synthesizer import synthesize
from docker_updater.models import ArgKind, ContainerDescriptor, LaunchArg, LaunchSpec


@pytest.fixture
def spec(inspect_attrs):
    """Launch spec of the fixture container."""
    return synthesize(ContainerDescriptor.from_inspect(inspect_attrs))


def _exec_tokens(script: str):
    body = script.split("exec ", 1)[1]
    # bash joins line continuations, shlex does not
    return shlex.split(body.replace("\\\n", " "))


def test_argv_places_options_before_image(spec):
    """Test the image and command come after every option flag."""
    argv = spec.argv()

    assert argv[:3] == ["docker", "run", "-d"]
    image_index = argv.index("nginx:1.25")
    assert argv[image_index:] == ["nginx:1.25", "nginx", "-g", "daemon off;"]
    assert "--entrypoint" in argv[:image_index]
    for i, token in enumerate(argv[3:image_index], start=3):
        assert token.startswith("--") or argv[i - 1] in ("--name", "--entrypoint")


def test_lone_flag_tokens():
    """Test how flags without a value and name-style flags are tokenized."""
    assert LaunchArg(ArgKind.PRIVILEGED).tokens() == ["--privileged"]
    assert LaunchArg(ArgKind.NAME, "web").tokens() == ["--name", "web"]
    assert LaunchArg(ArgKind.ENV, "A=b c").tokens() == ["--env=A=b c"]
    assert LaunchArg(ArgKind.IMAGE, "nginx").tokens() == ["nginx"]


def test_script_replays_exact_argv(spec):
    """Test the backup script quotes every token so the shell recovers argv exactly."""
    script = spec.render_script(datetime(2024, 5, 1, 12, 0, 0))

    assert _exec_tokens(script) == spec.argv()


def test_script_header(spec):
    """Test the script is a self-contained bash program."""
    script = spec.render_script(datetime(2024, 5, 1, 12, 0, 0))
    lines = script.splitlines()

    assert lines[0] == "#!/usr/bin/env bash"
    assert lines[1] == "set -Eeuo pipefail"
    assert "# Regenerate and run container web" in lines
    assert "# Generated by docker-updater at 2024-05-01 12:00:00" in lines


def test_env_values_with_shell_metacharacters_survive(spec):
    """Test env values with spaces, quotes and delimiters replay verbatim."""
    tokens = _exec_tokens(spec.render_script())

    assert "--env=GREETING=hello world" in tokens
    assert "--env=QUERY=a=b;c='d'" in tokens


def test_to_create_kwargs_matches_flags(spec):
    """Test the SDK translation carries the same configuration as the script."""
    kwargs = spec.to_create_kwargs()

    assert kwargs["name"] == "web"
    assert kwargs["image"] == "nginx:1.25"
    assert kwargs["hostname"] == "web-host"
    assert kwargs["user"] == "app"
    assert kwargs["working_dir"] == "/srv"
    assert kwargs["network_mode"] == "bridge"
    assert kwargs["restart_policy"] == {"Name": "unless-stopped", "MaximumRetryCount": 0}
    assert kwargs["cap_add"] == ["NET_ADMIN"]
    assert kwargs["cap_drop"] == ["MKNOD"]
    assert kwargs["extra_hosts"] == ["db.local:10.0.0.5"]
    assert kwargs["ports"] == {"80/tcp": [("", "8080")], "443/tcp": [("127.0.0.1", "8443")]}
    assert kwargs["volumes"] == [
        "/srv/web/html:/usr/share/nginx/html:ro",
        "web-cache:/var/cache/nginx:rw",
    ]
    assert kwargs["tmpfs"] == {"/run": "size=64m"}
    assert kwargs["devices"] == ["/dev/fuse:/dev/fuse:rwm"]
    assert kwargs["shm_size"] == 67108864
    assert kwargs["labels"] == {"maintainer": "ops team"}
    assert kwargs["entrypoint"] == ["/docker-entrypoint.sh"]
    assert kwargs["command"] == ["nginx", "-g", "daemon off;"]
    assert "privileged" not in kwargs


def test_to_create_kwargs_minimal():
    """Test a bare spec only sets name and image."""
    spec = LaunchSpec(
        name="app",
        image="alpine:3",
        args=(LaunchArg(ArgKind.NAME, "app"), LaunchArg(ArgKind.IMAGE, "alpine:3")),
    )

    assert spec.to_create_kwargs() == {"name": "app", "image": "alpine:3"}


def test_command_line_is_single_line(spec):
    """Test the one-line rendering splits back into argv."""
    assert shlex.split(spec.command_line()) == spec.argv()


def test_multi_part_entrypoint_is_flagged_in_script():
    """Test the script header warns when a split entrypoint is joined for replay."""
    entrypoint = LaunchArg(ArgKind.ENTRYPOINT, "/bin/sh -c", ("/bin/sh", "-c"))
    spec = LaunchSpec(
        name="app",
        image="alpine:3",
        args=(LaunchArg(ArgKind.NAME, "app"), entrypoint, LaunchArg(ArgKind.IMAGE, "alpine:3")),
    )

    script = spec.render_script(datetime(2024, 5, 1, 12, 0, 0))

    notes = [line for line in script.splitlines() if line.startswith("# Note:")]
    assert notes == [
        "# Note: multi-part entrypoint ['/bin/sh', '-c'] is replayed"
        " as one --entrypoint string, which may not match the original"
    ]
    assert "--entrypoint" in _exec_tokens(script)
    assert spec.to_create_kwargs()["entrypoint"] == ["/bin/sh", "-c"]


def test_single_part_entrypoint_has_no_note(spec):
    """Test a one-element entrypoint replays exactly and needs no warning."""
    assert "# Note:" not in spec.render_script()
