import gzip

import pytest

from app.utils.logger import logger, mask_phone, setup_logging


def _read_log(directory, app_name):
    """Closed sinks are gzipped on removal, so read every archived part."""
    parts = []
    for path in sorted(directory.glob(f"{app_name}_*.log*")):
        if path.suffix == ".gz":
            parts.append(gzip.decompress(path.read_bytes()).decode("utf-8"))
        else:
            parts.append(path.read_text(encoding="utf-8"))
    return "".join(parts)


@pytest.fixture
def captured():
    messages = []
    sink_id = logger.add(messages.append, format="{message}")
    yield messages
    logger.remove(sink_id)


@pytest.mark.unit
class TestMaskPhone:

    def test_keeps_last_four_digits(self) -> None:
        assert mask_phone("+821012345678") == "*********5678"

    def test_empty(self) -> None:
        assert mask_phone("") == "(none)"


@pytest.mark.unit
class TestLogging:

    def test_phone_numbers_are_redacted(self, captured) -> None:
        logger.info("code issued for +821012345678 and 01098765432")

        assert "+821012345678" not in captured[0]
        assert "01098765432" not in captured[0]
        assert "*********5678" in captured[0]
        assert "*******5432" in captured[0]

    def test_result_ids_are_left_alone(self, captured) -> None:
        logger.info("Saved result result_1767225600000_abc123xyz")
        assert "result_1767225600000_abc123xyz" in captured[0]

    def test_file_sink(self, tmp_path) -> None:
        setup_logging(log_dir=tmp_path, app_name="unit")
        try:
            logger.info("written-to-disk")
        finally:
            setup_logging()

        assert "written-to-disk" in _read_log(tmp_path, "unit")

    def test_repeated_setup_does_not_duplicate_sinks(self, tmp_path) -> None:
        setup_logging(log_dir=tmp_path, app_name="twice")
        setup_logging(log_dir=tmp_path, app_name="twice")
        try:
            logger.info("single-entry")
        finally:
            setup_logging()

        assert _read_log(tmp_path, "twice").count("single-entry") == 1
