import logging

import pytest

from poisson2d.logger import (
    BufferedLogHandler,
    LogConfig,
    PoissonLogger,
    SolverFormatter,
    create_file_handler,
)


def _quiet_config(tmp_path, **kwargs):
    return LogConfig(
        log_dir=tmp_path,
        console_logging={"enabled": False, "level": "info", "color": False},
        file_logging={
            "enabled": True,
            "filename": "test.log",
            "level": "debug",
            "max_bytes": 100_000,
            "backup_count": 1,
        },
        **kwargs,
    )


def test_log_config_validation():
    LogConfig().validate()
    with pytest.raises(ValueError):
        LogConfig(level="loud").validate()
    with pytest.raises(ValueError):
        LogConfig(console_logging={"enabled": False}).validate()
    with pytest.raises(ValueError):
        LogConfig(buffer_capacity=0).validate()


def test_log_config_roundtrip(tmp_path):
    config = _quiet_config(tmp_path, level="debug")
    restored = LogConfig.from_dict(config.to_dict())
    assert restored.to_dict() == config.to_dict()
    assert restored.get_file_path() == tmp_path / "test.log"

    partial = LogConfig.from_dict({"console_logging": {"color": False}})
    assert partial.console_logging["enabled"] is True
    assert partial.console_logging["color"] is False


def test_file_and_buffer(tmp_path):
    logger = PoissonLogger("poisson2d_test.file", _quiet_config(tmp_path, level="debug"))
    logger.info("solver started")
    logger.debug("details")

    recent = logger.get_recent_logs(1)
    assert len(recent) == 1 and "details" in recent[0]

    for handler in logger.logger.handlers:
        handler.flush()
    text = (tmp_path / "test.log").read_text(encoding="utf-8")
    assert "solver started" in text

    dump = tmp_path / "debug.txt"
    logger.save_debug_info(dump)
    assert "solver started" in dump.read_text(encoding="utf-8")


def test_sections_share_buffer(tmp_path):
    root = PoissonLogger("poisson2d_test.sections", _quiet_config(tmp_path))
    section = root.start_section("solver")

    assert section.name == "poisson2d_test.sections.solver"
    assert section.logger.handlers == []

    section.warning("slow convergence")
    assert any("slow convergence" in line for line in root.get_recent_logs())
    root.log_performance("solve", 1.25)
    assert "1.250 seconds" in root.get_recent_logs(1)[0]
    root.log_state({"iterations": 10})
    assert "iterations" in root.get_recent_logs(1)[0]


def test_context_manager_logs_and_reraises(tmp_path):
    logger = PoissonLogger("poisson2d_test.ctx", _quiet_config(tmp_path))
    with pytest.raises(RuntimeError):
        with logger.start_section("study"):
            raise RuntimeError("boom")
    assert any("boom" in line for line in logger.get_recent_logs())


def test_buffered_handler_capacity():
    handler = BufferedLogHandler(capacity=2)
    log = logging.getLogger("poisson2d_test.buffer")
    log.addHandler(handler)
    log.setLevel(logging.INFO)
    try:
        for k in range(3):
            log.info(f"message {k}")
    finally:
        log.removeHandler(handler)

    logs = handler.get_logs()
    assert len(logs) == 2
    assert "message 2" in logs[-1]
    handler.clear()
    assert handler.get_logs() == []


def _record(name, level=logging.WARNING, **extra):
    record = logging.LogRecord(name, level, __file__, 1, "sweep diverged", None, None)
    record.__dict__.update(extra)
    return record


def test_solver_formatter_sections_and_iteration():
    formatter = SolverFormatter("poisson2d")

    text = formatter.format(_record("poisson2d.numerics.poisson.solver", iteration=12))
    assert " - numerics.poisson.solver - WARNING - sweep diverged (iteration 12)" in text

    assert " - main - " in formatter.format(_record("poisson2d"))
    assert " - other.module - " in formatter.format(_record("other.module"))
    assert "(iteration" not in formatter.format(_record("poisson2d"))


def test_solver_formatter_color_and_detail():
    record = _record("poisson2d.analysis")
    colored = SolverFormatter(use_color=True).format(record)
    assert colored.startswith("\033[33m") and colored.endswith("\033[0m")
    assert record.levelname == "WARNING"

    detailed = SolverFormatter(detailed=True).format(_record("poisson2d.analysis"))
    assert "test_logger.py:1]" in detailed


def test_file_handler_only_when_enabled(tmp_path):
    config = LogConfig(log_dir=tmp_path / "logs")
    assert create_file_handler(config, "poisson2d") is None
    assert not (tmp_path / "logs").exists()

    handler = create_file_handler(_quiet_config(tmp_path / "logs"), "poisson2d")
    try:
        assert handler.baseFilename.endswith("test.log")
        assert (tmp_path / "logs").is_dir()
    finally:
        handler.close()
