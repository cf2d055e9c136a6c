import json
import threading
import unittest

from snapcook_backend.services.llm import (
    InvalidInputError,
    UpstreamUnavailableError,
)
from snapcook_backend.services.prompts import BASE_INSTRUCTION
from snapcook_backend.services.recommendations import (
    EnrichmentCancelledError,
    RecipeRecommender,
    RecommenderSettings,
    build_search_query,
)
from snapcook_backend.services.results import FailSoft
from snapcook_backend.services.schemas import RawVideo


def _model_output(*names, message="즐거운 요리 되세요"):
    return json.dumps(
        {
            "recipes": [
                {
                    "recipeName": name,
                    "description": f"{name} 설명",
                    "ingredients": ["재료"],
                    "instructions": ["조리"],
                    "estimatedTime": 15,
                    "difficulty": "보통",
                    "tips": "",
                }
                for name in names
            ],
            "message": message,
        },
        ensure_ascii=False,
    )


class _StubVisionClient:
    def __init__(self, output="", error=None):
        self.output = output
        self.error = error
        self.prompts: list[str] = []

    def generate(self, *, prompt, image_bytes, mime_type, system_prompt=None):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.output


class _StubVideoClient:
    """Serves canned search ids and details keyed by query."""

    def __init__(self, ids_by_query=None, videos_by_id=None, failing=()):
        self.ids_by_query = ids_by_query or {}
        self.videos_by_id = videos_by_id or {}
        self.failing = set(failing)
        self.queries: list[str] = []
        self._lock = threading.Lock()

    def search_ids(self, query, limit=10):
        with self._lock:
            self.queries.append(query)
        if query in self.failing:
            raise RuntimeError(f"search exploded for {query}")
        return FailSoft(list(self.ids_by_query.get(query, [])))

    def fetch_details(self, video_ids):
        return FailSoft([self.videos_by_id[video_id] for video_id in video_ids])


def _videos(prefix, views):
    return {
        f"{prefix}{idx}": RawVideo(video_id=f"{prefix}{idx}", view_count=count)
        for idx, count in enumerate(views)
    }


class RecommendTests(unittest.TestCase):
    def test_recommend_parses_model_output(self):
        vision = _StubVisionClient(_model_output("김치찌개", "계란말이"))
        recommender = RecipeRecommender(vision)

        result = recommender.recommend(
            image_bytes=b"img", mime_type="image/jpeg", modifier="make it spicy"
        )

        self.assertEqual([r.name for r in result.recipes], ["김치찌개", "계란말이"])
        self.assertEqual(result.message, "즐거운 요리 되세요")
        self.assertTrue(vision.prompts[0].startswith(BASE_INSTRUCTION))
        self.assertIn("make it spicy", vision.prompts[0])

    def test_unparseable_output_degrades(self):
        recommender = RecipeRecommender(_StubVisionClient("not json at all"))

        result = recommender.recommend(image_bytes=b"img", mime_type="image/png")

        self.assertEqual(result.recipes, ())
        self.assertIn("not json at all", result.message)

    def test_stage_one_errors_propagate(self):
        for error in [InvalidInputError("bad"), UpstreamUnavailableError("down")]:
            with self.subTest(error=type(error).__name__):
                recommender = RecipeRecommender(
                    _StubVisionClient(error=error), _StubVideoClient()
                )
                with self.assertRaises(type(error)):
                    recommender.recommend_with_videos(
                        image_bytes=b"img", mime_type="image/png"
                    )


class RecommendWithVideosTests(unittest.TestCase):
    def test_end_to_end_ranks_videos_per_recipe(self):
        videos = _videos("a", [100, 500, 50, 900, 10])
        video_client = _StubVideoClient(
            ids_by_query={"김치찌개 레시피": list(videos)},
            videos_by_id=videos,
        )
        recommender = RecipeRecommender(
            _StubVisionClient(_model_output("김치찌개", "계란말이")), video_client
        )

        result = recommender.recommend_with_videos(
            image_bytes=b"img",
            mime_type="image/jpeg",
            modifier="make it spicy",
            video_count=3,
        )

        self.assertEqual(len(result.recipes), 2)
        first, second = result.recipes
        self.assertEqual(first.recipe.name, "김치찌개")
        self.assertEqual([v.view_count for v in first.videos], [900, 500, 100])
        self.assertIsNone(first.video_error)
        self.assertEqual(second.recipe.name, "계란말이")
        self.assertEqual(second.videos, ())
        self.assertEqual(result.message, "즐거운 요리 되세요")
        self.assertCountEqual(
            video_client.queries, ["김치찌개 레시피", "계란말이 레시피"]
        )

    def test_failing_recipe_does_not_affect_siblings(self):
        videos = _videos("a", [10, 20])
        video_client = _StubVideoClient(
            ids_by_query={"A 레시피": list(videos)},
            videos_by_id=videos,
            failing={"B 레시피"},
        )
        recommender = RecipeRecommender(
            _StubVisionClient(_model_output("A", "B")), video_client
        )

        result = recommender.recommend_with_videos(
            image_bytes=b"img", mime_type="image/png"
        )

        recipe_a, recipe_b = result.recipes
        self.assertEqual([v.video_id for v in recipe_a.videos], ["a1", "a0"])
        self.assertEqual(recipe_b.videos, ())
        self.assertIn("search exploded", recipe_b.video_error)

    def test_order_is_preserved_regardless_of_completion(self):
        names = [f"dish{idx}" for idx in range(6)]
        recommender = RecipeRecommender(
            _StubVisionClient(_model_output(*names)),
            _StubVideoClient(),
            settings=RecommenderSettings(max_workers=3),
        )

        result = recommender.recommend_with_videos(
            image_bytes=b"img", mime_type="image/png"
        )

        self.assertEqual([entry.recipe.name for entry in result.recipes], names)

    def test_degraded_lookup_is_reported(self):
        class _DownVideoClient(_StubVideoClient):
            def search_ids(self, query, limit=10):
                return FailSoft([], diagnostic="quota exceeded")

        recommender = RecipeRecommender(
            _StubVisionClient(_model_output("A")), _DownVideoClient()
        )

        (entry,) = recommender.recommend_with_videos(
            image_bytes=b"img", mime_type="image/png"
        ).recipes

        self.assertEqual(entry.videos, ())
        self.assertEqual(entry.video_error, "quota exceeded")

    def test_without_video_client_recipes_have_no_videos(self):
        recommender = RecipeRecommender(_StubVisionClient(_model_output("A")))

        (entry,) = recommender.recommend_with_videos(
            image_bytes=b"img", mime_type="image/png"
        ).recipes

        self.assertEqual(entry.videos, ())
        self.assertIsNotNone(entry.video_error)

    def test_unparseable_output_skips_enrichment(self):
        video_client = _StubVideoClient()
        recommender = RecipeRecommender(_StubVisionClient("oops"), video_client)

        result = recommender.recommend_with_videos(
            image_bytes=b"img", mime_type="image/png"
        )

        self.assertEqual(result.recipes, ())
        self.assertIn("oops", result.message)
        self.assertEqual(video_client.queries, [])

    def test_cancellation_discards_results(self):
        release = threading.Event()
        cancel = threading.Event()

        class _BlockingVideoClient(_StubVideoClient):
            def search_ids(self, query, limit=10):
                cancel.set()
                release.wait(timeout=5)
                return FailSoft(["x"])

        recommender = RecipeRecommender(
            _StubVisionClient(_model_output("A", "B")),
            _BlockingVideoClient(),
            settings=RecommenderSettings(cancel_poll_seconds=0.01),
        )

        try:
            with self.assertRaises(EnrichmentCancelledError):
                recommender.recommend_with_videos(
                    image_bytes=b"img", mime_type="image/png", cancel_event=cancel
                )
        finally:
            release.set()


class BuildSearchQueryTests(unittest.TestCase):
    def test_appends_suffix(self):
        self.assertEqual(build_search_query("김치찌개"), "김치찌개 레시피")
        self.assertEqual(build_search_query("pasta", "recipe"), "pasta recipe")


if __name__ == "__main__":
    unittest.main()
