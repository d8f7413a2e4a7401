import unittest

from app.cristalix.request_builder import RequestBuilder, normalize_token


class TestNormalizeToken(unittest.TestCase):

    def test_adds_prefix(self):
        self.assertEqual(normalize_token("abc.def"), "Bearer abc.def")

    def test_keeps_existing_prefix(self):
        self.assertEqual(normalize_token("Bearer abc.def"), "Bearer abc.def")

    def test_is_idempotent(self):
        for token in ("abc", "Bearer abc", "  abc  "):
            once = normalize_token(token)
            self.assertEqual(normalize_token(once), once)


class TestRequestBuilder(unittest.TestCase):

    def setUp(self):
        self.builder = RequestBuilder("https://api.test/", "project-key", "secret")

    def test_single_request(self):
        request = self.builder.build_single_request("Some Player")
        self.assertEqual(request.method, "GET")
        self.assertEqual(
            request.url,
            "https://api.test/players/v1/getProfileByName?playerName=Some%20Player&project_key=project-key"
        )
        self.assertEqual(request.headers["Authorization"], "Bearer secret")
        self.assertIsNone(request.body)

    def test_single_request_encodes_reserved_characters(self):
        request = self.builder.build_single_request("a&b=c")
        self.assertIn("playerName=a%26b%3Dc&", request.url)

    def test_batch_request(self):
        request = self.builder.build_batch_request(["Alice", "bob"])
        self.assertEqual(request.method, "POST")
        self.assertEqual(request.url, "https://api.test/players/v1/getProfilesByNames?project_key=project-key")
        self.assertEqual(request.body, {"array": ["Alice", "bob"]})
        self.assertEqual(request.headers["Authorization"], "Bearer secret")
        self.assertEqual(request.headers["Content-Type"], "application/json")

    def test_batch_request_limit(self):
        self.builder.build_batch_request([f"p{i}" for i in range(50)])
        with self.assertRaises(ValueError):
            self.builder.build_batch_request([f"p{i}" for i in range(51)])

    def test_batch_request_custom_limit(self):
        with self.assertRaises(ValueError):
            self.builder.build_batch_request(["a", "b", "c"], max_batch_size=2)

    def test_prefixed_token_is_not_doubled(self):
        builder = RequestBuilder("https://api.test", "key", "Bearer secret")
        self.assertEqual(builder.build_single_request("x").headers["Authorization"], "Bearer secret")


if __name__ == '__main__':
    unittest.main()
