"""Tests for correlation-aware logging."""

import logging

from ofx_repair.shared.logging import CorrelationLogger, configure_logging, get_logger


class TestCorrelationLogger:
    """Test structured log records."""

    def test_records_carry_correlation_fields(self, caplog):
        logger = get_logger("ofx_repair.tests", "abc12345", "recovery_engine")
        with caplog.at_level(logging.INFO, logger="ofx_repair.tests"):
            logger.info("Repair pass completed", extra={"repair_count": 3})

        record = caplog.records[-1]
        assert record.getMessage() == "Repair pass completed"
        assert record.component == "recovery_engine"
        assert record.correlation_id == "abc12345"
        assert record.repair_count == 3

    def test_component_defaults_to_module_name(self):
        logger = CorrelationLogger("ofx_repair.repair.cleaner")
        assert logger.component == "cleaner"
        assert logger.correlation_id is None

    def test_debug_enabled(self, caplog):
        logger = get_logger("ofx_repair.tests.debug")
        with caplog.at_level(logging.DEBUG, logger="ofx_repair.tests.debug"):
            assert logger.is_debug_enabled()
        with caplog.at_level(logging.WARNING, logger="ofx_repair.tests.debug"):
            assert not logger.is_debug_enabled()


class TestConfigureLogging:
    """Test package logger setup."""

    def test_handler_is_attached_once(self):
        package_logger = logging.getLogger("ofx_repair")
        configure_logging("ERROR")
        configure_logging("DEBUG")
        assert len(package_logger.handlers) == 1
        assert package_logger.level == logging.DEBUG
        package_logger.setLevel(logging.NOTSET)
