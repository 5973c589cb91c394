import logging

import pytest

from cmpler.logger import init_logger


@pytest.fixture(autouse=True)
def _clean_logger(monkeypatch):
    monkeypatch.delenv("CMPLER_LOG", raising=False)
    yield
    logger = logging.getLogger("cmpler")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def _log_text(directory):
    return (directory / "cmpler.log").read_text(encoding="utf-8")


def test_messages_reach_the_log_file(tmp_path):
    init_logger(tmp_path)
    logging.getLogger("cmpler.driver").info("hello from the driver")
    text = _log_text(tmp_path)
    assert "hello from the driver" in text
    assert "cmpler.driver" in text


def test_default_level_is_info(tmp_path):
    logger = init_logger(tmp_path)
    assert logger.level == logging.INFO
    logging.getLogger("cmpler.driver").debug("hidden detail")
    logging.getLogger("cmpler.driver").info("visible line")
    text = _log_text(tmp_path)
    assert "hidden detail" not in text
    assert "visible line" in text


def test_environment_enables_debug(tmp_path, monkeypatch):
    monkeypatch.setenv("CMPLER_LOG", "debug")
    init_logger(tmp_path)
    logging.getLogger("cmpler.syntax").debug("fine detail")
    assert "fine detail" in _log_text(tmp_path)


def test_environment_restricts_to_errors(tmp_path, monkeypatch):
    monkeypatch.setenv("CMPLER_LOG", "error")
    init_logger(tmp_path)
    log = logging.getLogger("cmpler.codegen")
    log.info("routine note")
    log.error("serious failure")
    text = _log_text(tmp_path)
    assert "routine note" not in text
    assert "serious failure" in text


def test_unknown_level_falls_back_to_info(tmp_path, monkeypatch):
    monkeypatch.setenv("CMPLER_LOG", "loud")
    logger = init_logger(tmp_path)
    assert logger.level == logging.INFO


def test_repeated_initialisation_does_not_duplicate_handlers(tmp_path):
    init_logger(tmp_path)
    logger = init_logger(tmp_path)
    assert len(logger.handlers) == 2
    logging.getLogger("cmpler").info("only once")
    assert _log_text(tmp_path).count("only once") == 1


def test_missing_directory_is_created(tmp_path):
    target = tmp_path / "nested" / "logs"
    init_logger(target)
    assert (target / "cmpler.log").is_file()


def test_console_output_goes_to_stdout(tmp_path, capsys):
    init_logger(tmp_path)
    logging.getLogger("cmpler").warning("shown on console")
    assert "shown on console" in capsys.readouterr().out


def test_default_directory_is_logs_in_working_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    logger = init_logger()
    assert logger.level == logging.INFO
    logging.getLogger("cmpler").info("written to default place")
    assert "written to default place" in _log_text(tmp_path / "logs")