import json
import logging
import shutil
import tempfile
import unittest
from pathlib import Path

from feedproxy.logging import StructuredJSONFormatter, setup_logging, log_function_call


class TestStructuredJSONFormatter(unittest.TestCase):
    def make_record(self, **extra):
        record = logging.LogRecord("feedproxy.gateway", logging.INFO, __file__, 10, "Served feed", None, None)
        for name, value in extra.items():
            setattr(record, name, value)
        return record

    def test_context_and_request_fields(self):
        record = self.make_record(
            context={'component': 'gateway'},
            request_url='http://localhost/?url=x',
            request_method='GET',
            response_status=200,
        )

        output = json.loads(StructuredJSONFormatter().format(record))

        self.assertEqual(output['message'], "Served feed")
        self.assertEqual(output['level'], "INFO")
        self.assertEqual(output['context'], {'component': 'gateway'})
        self.assertEqual(output['request'], {'url': 'http://localhost/?url=x', 'method': 'GET', 'status': 200})

    def test_plain_record(self):
        output = json.loads(StructuredJSONFormatter().format(self.make_record()))
        self.assertNotIn('context', output)
        self.assertNotIn('request', output)


class TestSetupLogging(unittest.TestCase):
    def setUp(self):
        self.log_dir = Path(tempfile.mkdtemp())
        root = logging.getLogger()
        self.root_handlers = list(root.handlers)
        self.root_level = root.level

    def tearDown(self):
        root = logging.getLogger()
        for handler in list(root.handlers):
            if handler not in self.root_handlers:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(self.root_level)
        for component_logger in self.loggers.values():
            for handler in list(component_logger.handlers):
                component_logger.removeHandler(handler)
                handler.close()
        shutil.rmtree(self.log_dir, ignore_errors=True)

    def test_creates_component_logs(self):
        self.loggers = setup_logging("feedproxy", log_dir=self.log_dir)

        self.assertEqual(set(self.loggers), {'parsing', 'fetching', 'cache', 'gateway'})
        self.loggers['cache'].warning("cache write failed")
        for handler in self.loggers['cache'].handlers:
            handler.flush()

        lines = (self.log_dir / "feedproxy_cache.log").read_text(encoding='utf-8').splitlines()
        self.assertEqual(json.loads(lines[-1])['message'], "cache write failed")
        self.assertTrue((self.log_dir / "feedproxy.log").exists())
        self.assertTrue((self.log_dir / "feedproxy_error.log").exists())


class TestLogFunctionCall(unittest.TestCase):
    def test_reraises_and_logs(self):
        logger = logging.getLogger("feedproxy.tests")

        @log_function_call(logger)
        def fail():
            raise RuntimeError("boom")

        with self.assertLogs(logger, level='ERROR') as logs:
            with self.assertRaises(RuntimeError):
                fail()
        self.assertIn("Error in fail", logs.output[0])
