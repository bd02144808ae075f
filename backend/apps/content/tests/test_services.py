import json
import types
import unittest
from datetime import datetime, timezone as dt_timezone

from apps.content.services import ContentService, parse_about

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=dt_timezone.utc)


def about_payload(**overrides):
    data = {
        "heroImage": "hero.jpg",
        "myWhyTitle": "My Why",
        "myWhyText1": "One",
        "myWhyText2": "Two",
        "myWhyImage": "why.jpg",
        "ourStoryTitle": "Our Story",
        "ourStoryText1": "Three",
        "ourStoryText2": "Four",
        "ourStoryImage": "story.jpg",
        "signature": "Dee",
        "signatureTitle": "Founder, Tassel & Wicker",
        "builtForTitle": "Built For",
        "builtForVideos": ["a.mp4"],
    }
    data.update(overrides)
    return data


class FakeContentRepository:
    def __init__(self):
        self.rows = {}

    def for_page(self, page):
        return self.rows.get(page)

    def upsert(self, page, **data):
        row = self.rows.get(page) or types.SimpleNamespace(page=page, created_at=NOW)
        for k, v in data.items():
            setattr(row, k, v)
        row.updated_at = NOW
        self.rows[page] = row
        return row


class ParseAboutTests(unittest.TestCase):
    def test_accepts_object_and_json_string(self):
        self.assertEqual(parse_about(about_payload())[1], None)
        data, problem = parse_about(json.dumps(about_payload()))
        self.assertIsNone(problem)
        self.assertEqual(data["signature"], "Dee")

    def test_reports_missing_fields(self):
        payload = about_payload()
        del payload["heroImage"]
        payload["signature"] = None
        _, problem = parse_about(payload)
        self.assertEqual(problem, "Missing required fields: heroImage, signature")

    def test_videos_must_be_a_list(self):
        _, problem = parse_about(about_payload(builtForVideos="a.mp4"))
        self.assertEqual(problem, "builtForVideos must be an array")

    def test_text_fields_must_be_strings(self):
        _, problem = parse_about(about_payload(myWhyTitle=3))
        self.assertEqual(problem, "Invalid field types (must be strings): myWhyTitle")

    def test_invalid_json(self):
        self.assertEqual(parse_about("{not json")[1], "About page content must be valid JSON")


class ContentServiceTests(unittest.TestCase):
    def setUp(self):
        self.repo = FakeContentRepository()
        self.service = ContentService(pages=self.repo)

    def test_unknown_page_is_invalid(self):
        _, error = self.service.get_page("careers")
        self.assertEqual(error[0], "INVALID_PAGE")
        _, error = self.service.update_page("careers", "<p>x</p>")
        self.assertEqual(error[0], "INVALID_PAGE")

    def test_missing_content_not_found(self):
        _, error = self.service.get_page("returns")
        self.assertEqual(error[0], "CONTENT_NOT_FOUND")

    def test_policy_page_stored_as_html(self):
        dto, error = self.service.update_page("returns", "<p>30 days</p>", user_id=3)
        self.assertIsNone(error)
        self.assertEqual(dto.title, "Returns & Exchanges")
        self.assertEqual(dto.content, "<p>30 days</p>")
        self.assertEqual(dto.updated_by, "3")
        self.assertEqual(self.service.get_page("returns")[0].content, "<p>30 days</p>")

    def test_policy_page_rejects_objects(self):
        _, error = self.service.update_page("shipping", {"html": "<p>x</p>"})
        self.assertEqual(error[0], "VALIDATION_ERROR")

    def test_about_round_trips_as_object(self):
        dto, error = self.service.update_page("about", json.dumps(about_payload()))
        self.assertIsNone(error)
        self.assertEqual(dto.content["builtForVideos"], ["a.mp4"])
        self.assertEqual(json.loads(self.repo.rows["about"].content)["heroImage"], "hero.jpg")

    def test_invalid_about_not_saved(self):
        _, error = self.service.update_page("about", {"heroImage": "x"})
        self.assertEqual(error[0], "VALIDATION_ERROR")
        self.assertNotIn("about", self.repo.rows)

    def test_empty_content_rejected(self):
        _, error = self.service.update_page("returns", "")
        self.assertEqual(error, ("VALIDATION_ERROR", "Content is required", {"content": "required"}))
