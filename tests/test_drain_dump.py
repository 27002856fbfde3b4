# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from unittest.mock import patch

from qcq_lib.drain.dump import Dump, DumpState


def test_dump_deletes_sent_files(tmp_path):
    a = tmp_path / "a.out"
    b = tmp_path / "b.out"
    a.write_text("a")
    b.write_text("b")

    dump = Dump()
    dump.send(a)
    dump.send(str(b))
    dump.shutdown()

    assert not a.exists()
    assert not b.exists()
    assert dump.state() == DumpState.STOPPED


def test_dump_deletes_in_order(tmp_path):
    files = [tmp_path / f"job{i}.out" for i in range(5)]
    for file in files:
        file.write_text("")

    deleted = []
    with patch.object(Dump, "_delete", side_effect=deleted.append):
        dump = Dump()
        for file in files:
            dump.send(file)
        dump.shutdown()

    assert deleted == files


def test_dump_missing_file_is_tolerated(tmp_path):
    present = tmp_path / "present.out"
    present.write_text("")

    with patch("qcq_lib.drain.dump.logger") as mock_logger:
        dump = Dump()
        dump.send(tmp_path / "missing.out")
        dump.send(present)
        dump.shutdown()

    assert not present.exists()
    mock_logger.warning.assert_called_once()
    assert "missing.out" in str(mock_logger.warning.call_args[0][0])


def test_dump_ignores_files_after_shutdown(tmp_path):
    file = tmp_path / "late.out"
    file.write_text("")

    dump = Dump()
    dump.shutdown()
    dump.send(file)

    assert file.exists()


def test_dump_shutdown_twice(tmp_path):
    dump = Dump()
    dump.shutdown()
    dump.shutdown(drain=False)

    assert dump.state() == DumpState.STOPPED


def test_dump_shutdown_without_drain_stops_worker():
    dump = Dump()
    dump.shutdown(drain=False)

    assert dump.state() == DumpState.STOPPED
    assert not dump._thread.is_alive()


def test_dump_context_manager(tmp_path):
    file = tmp_path / "ctx.out"
    file.write_text("")

    with Dump() as dump:
        dump.send(file)
        assert dump.state() == DumpState.RUNNING

    assert not file.exists()
    assert dump.state() == DumpState.STOPPED
