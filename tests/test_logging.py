"""
Tests for DetectionLogger.
"""

import io
import logging

from hwprofile.logging import DetectionLogger, LogConfig, create_detection_logger, get_logger


class TestDetectionLogger:
    """Console filtering and file output."""

    def test_console_filters_debug(self):
        stream = io.StringIO()
        logger = DetectionLogger(stream=stream)
        logger.debug("probe detail")
        logger.info("hello")
        assert stream.getvalue() == "hello\n"
        assert "probe detail" in logger.get_content()

    def test_verbose_shows_debug(self):
        stream = io.StringIO()
        logger = DetectionLogger(verbose=True, stream=stream)
        logger.debug("probe detail")
        assert "probe detail" in stream.getvalue()

    def test_prefixes(self):
        stream = io.StringIO()
        logger = DetectionLogger(stream=stream)
        logger.warning("careful")
        logger.error("broken")
        logger.success("done")
        output = stream.getvalue()
        assert "⚠ WARNING: careful" in output
        assert "✗ ERROR: broken" in output
        assert "✓ done" in output

    def test_sections_are_debug(self):
        stream = io.StringIO()
        logger = DetectionLogger(stream=stream)
        logger.section("Signal probes")
        assert stream.getvalue() == ""
        logger.section("Summary", level=logging.INFO)
        assert "Summary" in stream.getvalue()

    def test_file_output(self, tmp_path):
        stream = io.StringIO()
        with DetectionLogger(output_dir=tmp_path, filename_prefix="run", stream=stream) as logger:
            logger.debug("file only")
            logger.info("both")
        content = (tmp_path / "run.log").read_text()
        assert "file only" in content
        assert "both" in content
        assert content.startswith("[")
        assert "file only" not in stream.getvalue()

    def test_buffer_keeps_recent_lines(self):
        """Long runs keep only the newest messages in memory."""
        logger = DetectionLogger(config=LogConfig(buffered_lines=3), stream=io.StringIO())
        for i in range(10):
            logger.debug(f"line {i}")
        assert logger.get_content() == "line 7\nline 8\nline 9"

    def test_registers_global(self):
        logger = DetectionLogger(stream=io.StringIO())
        assert get_logger() is logger


class TestDefaultLogger:
    """Module-level default logger."""

    def test_default_is_quiet(self):
        assert get_logger().console_level == logging.WARNING


class TestCreateDetectionLogger:
    """Standard log file naming."""

    def test_console_only(self):
        logger = create_detection_logger()
        assert logger.log_path is None

    def test_timestamped_file(self, tmp_path):
        logger = create_detection_logger(tmp_path, command="vm")
        try:
            assert logger.log_path.parent == tmp_path
            assert logger.log_path.name.startswith("vm_")
            assert logger.log_path.suffix == ".log"
        finally:
            logger.close()
