import unittest

from snapcook_backend.services.ranking import (
    clamp_video_count,
    rank_videos,
    select_thumbnail,
    truncate_description,
)
from snapcook_backend.services.schemas import RawVideo


def _video(video_id, views, **kwargs):
    return RawVideo(video_id=video_id, view_count=views, **kwargs)


class RankVideosTests(unittest.TestCase):
    def test_orders_by_view_count_and_truncates(self):
        videos = [
            _video("a", 100),
            _video("b", 500),
            _video("c", 50),
            _video("d", 900),
            _video("e", 10),
        ]

        ranked = rank_videos(videos, 3)

        self.assertEqual([v.video_id for v in ranked], ["d", "b", "a"])
        self.assertEqual([v.view_count for v in ranked], [900, 500, 100])

    def test_ties_keep_search_order(self):
        videos = [_video("first", 7), _video("second", 7), _video("third", 9)]

        ranked = rank_videos(videos, 3)

        self.assertEqual([v.video_id for v in ranked], ["third", "first", "second"])

    def test_length_is_capped_at_three(self):
        videos = [_video(str(idx), idx) for idx in range(10)]

        self.assertEqual(len(rank_videos(videos, 10)), 3)
        self.assertEqual(len(rank_videos(videos, 0)), 1)
        self.assertEqual(len(rank_videos(videos[:2], 3)), 2)

    def test_empty_input(self):
        self.assertEqual(rank_videos(None), [])
        self.assertEqual(rank_videos([]), [])

    def test_summary_fields(self):
        video = _video(
            "abc123",
            42,
            title="김치찌개",
            description="x" * 250,
            channel_title="백종원",
            thumbnails={"default": "d.jpg", "medium": "m.jpg"},
        )

        (summary,) = rank_videos([video], 1)

        self.assertEqual(summary.video_url, "https://www.youtube.com/watch?v=abc123")
        self.assertEqual(summary.thumbnail_url, "m.jpg")
        self.assertEqual(summary.channel_title, "백종원")
        self.assertEqual(len(summary.description), 203)


class HelperTests(unittest.TestCase):
    def test_clamp_video_count(self):
        cases = {-1: 1, 0: 1, 1: 1, 2: 2, 3: 3, 4: 3, None: 3}
        for requested, expected in cases.items():
            with self.subTest(requested=requested):
                self.assertEqual(clamp_video_count(requested), expected)

    def test_thumbnail_priority(self):
        cases = [
            ({"high": "h", "medium": "m", "default": "d"}, "h"),
            ({"medium": "m", "default": "d"}, "m"),
            ({"high": "h", "default": "d"}, "h"),
            ({"default": "d"}, "d"),
            ({}, ""),
        ]
        for thumbnails, expected in cases:
            with self.subTest(thumbnails=thumbnails):
                self.assertEqual(select_thumbnail(thumbnails), expected)

    def test_truncate_description(self):
        exact = "a" * 200
        self.assertEqual(truncate_description(exact), exact)
        self.assertEqual(truncate_description(""), "")
        self.assertEqual(truncate_description(None), "")

        long_text = "b" * 201
        truncated = truncate_description(long_text)
        self.assertEqual(len(truncated), 203)
        self.assertTrue(truncated.endswith("..."))
        self.assertEqual(truncated[:200], long_text[:200])


if __name__ == "__main__":
    unittest.main()
