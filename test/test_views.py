import unittest

from app.views import PAGE_SIZE, cache_stats_embed, parse_names, skin_embed, skins_embeds


class TestViews(unittest.TestCase):

    def test_parse_names(self):
        self.assertEqual(parse_names("Alice, bob  carol,,"), ["Alice", "bob", "carol"])
        self.assertEqual(parse_names("  "), [])

    def test_skin_embed(self):
        embed = skin_embed("Alice", {"player_id": "uuid-a", "texture_url": "https://t/a.png",
                                     "resolved_at": 1_700_000_000.0})
        self.assertEqual(embed.title, "Alice")
        self.assertIn("uuid-a", embed.fields[0].value)
        self.assertEqual(embed.fields[1].value, "https://t/a.png")

    def test_skins_embeds_are_paginated(self):
        skins = {f"p{i:02}": {"id": f"uuid-{i}", "texture_url": f"https://t/{i}.png"} for i in range(23)}
        pages = skins_embeds(skins, total=30)

        self.assertEqual(len(pages), 3)
        self.assertEqual(len(pages[0].fields), PAGE_SIZE)
        self.assertEqual(len(pages[2].fields), 3)
        self.assertIn("Loaded **23** of **30**", pages[0].description)
        self.assertEqual(pages[0].fields[0].name, "p00")

    def test_skins_embeds_empty(self):
        pages = skins_embeds({}, total=4)
        self.assertEqual(len(pages), 1)
        self.assertIn("No skins available", pages[0].description)

    def test_skins_embeds_empty_with_notice(self):
        pages = skins_embeds({}, total=0, notice="Failed to fetch skins")
        self.assertEqual(len(pages), 1)
        self.assertIn("Loaded **0** of **0**", pages[0].description)
        self.assertIn("Failed to fetch skins", pages[0].description)
        self.assertNotIn("No skins available", pages[0].description)

    def test_cache_stats_embed(self):
        stats = {"size": 2, "entries": [
            {"username": "alice", "player_id": "uuid-a", "age_seconds": 30},
            {"username": "bob", "player_id": "uuid-b", "age_seconds": 5},
        ]}
        embed = cache_stats_embed(stats, {"upstream_requests": 4, "failed_chunks": 1})
        self.assertIn("**2**", embed.description)
        self.assertTrue(embed.fields[0].value.startswith("`bob`"))
        self.assertIn("failed_chunks: 1", embed.fields[1].value)


if __name__ == '__main__':
    unittest.main()
