import shutil
import tempfile
import unittest

from pstcodec.logging import add_stderr_handler


# show everything the codec logs while the tests run
add_stderr_handler(verbosity="*")


class PSTTestCase(unittest.TestCase):
    """Base class for the unit tests. Each test gets its own scratch directory."""

    def setUp(self):
        super().setUp()
        self.pstcodec_path = tempfile.mkdtemp(prefix="pstcodec-test-")

    def tearDown(self):
        shutil.rmtree(self.pstcodec_path)
        super().tearDown()
