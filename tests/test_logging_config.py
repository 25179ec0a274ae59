import logging

from embodied_mrio.utils.logging_config import set_package_level, setup_logger


def test_setup_logger_attaches_handlers_once():
    logger = setup_logger("embodied_mrio.tests.once")
    setup_logger("embodied_mrio.tests.once")
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO


def test_setup_logger_writes_log_file(tmp_path):
    log_file = tmp_path / "run.log"
    logger = setup_logger("embodied_mrio.tests.file", level="DEBUG", log_file=str(log_file))
    try:
        logger.debug("factorized system")
        for handler in logger.handlers:
            handler.flush()
        assert "DEBUG - factorized system" in log_file.read_text()
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


def test_set_package_level_only_touches_package_loggers():
    package_logger = setup_logger("embodied_mrio.tests.verbose")
    other = setup_logger("other_package.module")
    set_package_level("DEBUG")
    try:
        assert package_logger.level == logging.DEBUG
        assert package_logger.handlers[0].level == logging.DEBUG
        assert other.level == logging.INFO
    finally:
        set_package_level("INFO")
