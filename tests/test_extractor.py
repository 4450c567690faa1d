import io
import unittest

from jsonsurf.extractor import copy_json, extract_json_to_string
from jsonsurf.settings import ExtractorSettings, set_extractor_settings


class TestExtractJsonToString(unittest.TestCase):
    def test_single(self):
        self.assertEqual(extract_json_to_string('Before {"key":"value"} After'), '{"key":"value"}')

    def test_multiple(self):
        self.assertEqual(extract_json_to_string('Start {"a":1}{"b":2} End'), '{"a":1}{"b":2}')

    def test_nested(self):
        result = extract_json_to_string('Data: {"outer":{"inner":true}} Text')
        self.assertEqual(result, '{"outer":{"inner":true}}')

    def test_array(self):
        self.assertEqual(extract_json_to_string("Array: [1,2,3] End"), "[1,2,3]")

    def test_no_json(self):
        self.assertEqual(extract_json_to_string("nothing structured"), "")
        self.assertEqual(extract_json_to_string(""), "")

    def test_incomplete_span_is_returned_as_is(self):
        self.assertEqual(extract_json_to_string('head {"a": [1, 2'), '{"a": [1, 2')

    def test_fresh_state_per_call(self):
        extract_json_to_string('{"unclosed": ')
        self.assertEqual(extract_json_to_string('x {"b":2} y'), '{"b":2}')


class TestCopyJson(unittest.TestCase):
    def tearDown(self):
        set_extractor_settings(None)

    def test_copy_log_stream(self):
        source = io.StringIO(
            "Starting application\n"
            'Debug data: {"timestamp":1623766800,"level":"info",'
            '"message":"Application started successfully"}\n'
            "Processing request from 192.168.1.1\n"
            'Request payload: {"id":42,"action":"get",'
            '"params":{"filter":"active"}}\n'
        )
        sink = io.StringIO()
        still_open = copy_json(source, sink, chunk_size=7)
        self.assertFalse(still_open)
        self.assertEqual(
            sink.getvalue(),
            '{"timestamp":1623766800,"level":"info","message":"Application started successfully"}'
            '{"id":42,"action":"get","params":{"filter":"active"}}',
        )

    def test_copy_reports_unterminated_span(self):
        source = io.StringIO('ok {"a": [1, 2')
        sink = io.StringIO()
        with self.assertLogs("jsonsurf.extractor", level="WARNING"):
            still_open = copy_json(source, sink, chunk_size=4)
        self.assertTrue(still_open)
        self.assertEqual(sink.getvalue(), '{"a": [1, 2')

    def test_copy_uses_configured_chunk_size(self):
        set_extractor_settings(ExtractorSettings(chunk_size=1))
        sink = io.StringIO()
        self.assertFalse(copy_json(io.StringIO("a[1]b"), sink))
        self.assertEqual(sink.getvalue(), "[1]")


if __name__ == "__main__":
    unittest.main()
