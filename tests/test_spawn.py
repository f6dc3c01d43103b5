"""
Tests for async process spawning with real child processes.
"""
import asyncio
import sys

import pytest

from cavelauncher.utils.spawn import _pump_lines, spawn


@pytest.mark.asyncio
async def test_forwards_stdout_and_stderr_lines():
    out, err = [], []
    script = "import sys; print('one'); print('two'); sys.stderr.write('oops\\n'); sys.stdout.write('tail')"

    code = await spawn(sys.executable, ["-c", script], on_token=out.append, on_err_token=err.append)

    assert code == 0
    assert out == ["one", "two", "tail"]
    assert err == ["oops"]


@pytest.mark.asyncio
async def test_returns_exit_code():
    code = await spawn(sys.executable, ["-c", "import sys; sys.exit(3)"])

    assert code == 3


@pytest.mark.asyncio
async def test_passes_env_and_cwd(tmp_path):
    out = []
    script = "import os; print(os.environ['CAVE_API_KEY']); print(os.getcwd())"

    await spawn(
        sys.executable, ["-c", script],
        env={"CAVE_API_KEY": "secret", "PATH": ""},
        cwd=str(tmp_path),
        on_token=out.append,
    )

    assert out[0] == "secret"
    assert out[1] == str(tmp_path.resolve())


@pytest.mark.asyncio
async def test_missing_command_raises_oserror(tmp_path):
    with pytest.raises(OSError):
        await spawn(str(tmp_path / "does-not-exist"))


@pytest.mark.asyncio
async def test_character_split_across_chunks_is_kept():
    reader = asyncio.StreamReader()
    lines = []
    encoded = "café\n".encode()

    pump = asyncio.create_task(_pump_lines(reader, lines.append))
    reader.feed_data(encoded[:4])  # ends in the middle of "é"
    await asyncio.sleep(0)
    reader.feed_data(encoded[4:])
    reader.feed_eof()
    await asyncio.wait_for(pump, timeout=5)

    assert lines == ["café"]
