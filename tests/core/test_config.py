"""
Tests for backend selection and logging configuration.
"""

import logging

import pytest

from pymatrix import DoubleMatrix
from pymatrix.core import config
from pymatrix.core.backends import ReferenceBackend
from pymatrix.core.config import get_backend, set_backend, use_backend
from pymatrix.core.exceptions import ValidationError
from pymatrix.core.observability import LOGGER_NAME, configure_logging
from pymatrix.linalg.eigen import symmetric_eigenvectors


class TestBackendSelection:

    def test_use_backend_restores_previous(self):
        before = get_backend()
        with use_backend('reference') as active:
            assert active.name == 'reference'
            assert get_backend() is active
        assert get_backend() is before

    def test_restored_after_exception(self):
        before = get_backend()
        with pytest.raises(RuntimeError):
            with use_backend('reference'):
                raise RuntimeError("boom")
        assert get_backend() is before

    def test_instance_accepted(self):
        backend = ReferenceBackend()
        with use_backend(backend) as active:
            assert active is backend

    def test_unknown_name(self):
        before = get_backend()
        with pytest.raises(ValidationError, match="unknown backend"):
            set_backend('gpu')
        assert get_backend() is before

    def test_non_backend_rejected(self):
        with pytest.raises(ValidationError, match="expected a backend name"):
            set_backend(42)

    def test_set_backend_returns_previous(self):
        before = get_backend()
        try:
            assert set_backend('reference') is before
        finally:
            set_backend(before)

    def test_environment_variable(self, monkeypatch):
        monkeypatch.setattr(config, '_active', None)
        monkeypatch.setenv(config.BACKEND_ENV_VAR, 'reference')
        assert get_backend().name == 'reference'


class TestLogging:

    @pytest.fixture(autouse=True)
    def restore_logger(self):
        logger = logging.getLogger(LOGGER_NAME)
        saved = (list(logger.handlers), logger.level, logger.propagate)
        yield
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        for handler in saved[0]:
            logger.addHandler(handler)
        logger.setLevel(saved[1])
        logger.propagate = saved[2]

    def test_configure_sets_level(self):
        logger = configure_logging("DEBUG")
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_repeated_configuration_does_not_duplicate(self):
        configure_logging("INFO")
        logger = configure_logging("INFO")
        assert len(logger.handlers) == 1

    def test_log_file(self, tmp_path):
        path = tmp_path / "pymatrix.log"
        logger = configure_logging("WARNING", log_file=str(path))
        assert len(logger.handlers) == 2
        logging.getLogger("pymatrix.core.compute.lapack").warning("workspace probe")
        for handler in logger.handlers:
            handler.flush()
        assert "workspace probe" in path.read_text()

    def test_log_file_records_debug_below_console_level(self, tmp_path):
        path = tmp_path / "pymatrix.log"
        logger = configure_logging("INFO", log_file=str(path))
        console = [h for h in logger.handlers if not isinstance(h, logging.FileHandler)]
        assert [h.level for h in console] == [logging.INFO]
        with use_backend('reference'):
            symmetric_eigenvectors(DoubleMatrix.eye(3))
        for handler in logger.handlers:
            handler.flush()
        text = path.read_text()
        assert "lwork=" in text
        assert "DEBUG" in text
