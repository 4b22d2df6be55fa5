import io
import logging
import unittest

from treestore.logging_setup import setup_logging


class TestSetupLogging(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level

        def restore() -> None:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)

        self.addCleanup(restore)

    def test_repeated_calls_install_one_handler(self) -> None:
        stream = io.StringIO()
        before = len(logging.getLogger().handlers)

        setup_logging("INFO", stream=stream)
        setup_logging("DEBUG", stream=stream)
        logging.getLogger("treestore.test").info("hello")

        self.assertEqual(len(logging.getLogger().handlers), before + 1)
        self.assertEqual(stream.getvalue().count("hello"), 1)
        self.assertEqual(logging.getLogger().level, logging.DEBUG)

    def test_format(self) -> None:
        stream = io.StringIO()
        setup_logging(logging.INFO, stream=stream)
        logging.getLogger("treestore.test").warning("careful")
        self.assertIn("[WARNING] [treestore.test] careful", stream.getvalue())


if __name__ == "__main__":
    unittest.main()
