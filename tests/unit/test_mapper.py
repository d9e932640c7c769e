"""
Unit tests for WordPress record mapping
"""

from datetime import datetime
from schemas.wordpress import WordPressUser, WordPressCategory, WordPressPost, WordPressMedia
from ingestion.transformers.wordpress_mapper import (
    map_user_to_editor,
    map_category_to_category,
    map_post_to_article
)
from wordpress_fakes import wp_post


class TestMapUser:

    def test_full_user(self):
        user = WordPressUser(
            id=1,
            name="Jane &amp; Co",
            slug="jane",
            email="jane@x.com",
            description="Writes &quot;things&quot;",
            avatar_urls={"24": "a24", "48": "a48", "96": "a96"}
        )
        editor = map_user_to_editor(user)

        assert editor.name == "Jane & Co"
        assert editor.slug == "jane"
        assert editor.email == "jane@x.com"
        assert editor.bio == 'Writes "things"'
        assert editor.avatar == "a96"

    def test_placeholder_email_from_slug(self):
        editor = map_user_to_editor(WordPressUser(id=2, name="Jane Doe", slug=""))

        assert editor.slug == "jane-doe"
        assert editor.email == "jane-doe@wordpress-migrated.local"

    def test_slug_falls_back_to_id(self):
        editor = map_user_to_editor(WordPressUser(id=7, name="", slug=""))

        assert editor.slug == "user-7"
        assert editor.email == "user-7@wordpress-migrated.local"

    def test_avatar_prefers_largest_available(self):
        editor = map_user_to_editor(WordPressUser(id=1, name="A", slug="a", avatar_urls={"24": "small", "48": "medium"}))
        assert editor.avatar == "medium"

        editor = map_user_to_editor(WordPressUser(id=1, name="A", slug="a", avatar_urls={}))
        assert editor.avatar is None


class TestMapCategory:

    def test_decodes_name_and_derives_slug(self):
        category = map_category_to_category(WordPressCategory(id=5, name="News &amp; Views", slug=""))

        assert category.name == "News & Views"
        assert category.slug == "news-views"
        assert category.description is None

    def test_keeps_given_slug(self):
        category = map_category_to_category(WordPressCategory(id=5, name="Tech", slug="tech", description="All tech"))

        assert category.slug == "tech"
        assert category.description == "All tech"


class TestMapPost:

    def test_published_post(self):
        post = WordPressPost.model_validate(wp_post(9, "<b>Hello</b> &amp; bye", "hello", content="<p>A &amp; B</p>"))
        article = map_post_to_article(post)

        assert article.title == "Hello & bye"
        assert article.slug == "hello"
        assert article.content == "<p>A & B</p>"
        assert article.published is True
        assert article.published_at == datetime(2024, 1, 1)
        assert article.scheduled_at is None
        assert article.read_time == 1
        assert article.featured is False

    def test_future_post_is_scheduled(self):
        post = WordPressPost.model_validate(wp_post(9, "Later", "later", status="future", date="2030-05-01T09:30:00"))
        article = map_post_to_article(post)

        assert article.published is False
        assert article.published_at is None
        assert article.scheduled_at == datetime(2030, 5, 1, 9, 30)

    def test_draft_is_neither_published_nor_scheduled(self):
        post = WordPressPost.model_validate(wp_post(9, "Draft", "draft", status="draft"))
        article = map_post_to_article(post)

        assert article.published is False
        assert article.published_at is None
        assert article.scheduled_at is None

    def test_excerpt_stripped_and_truncated(self):
        post = WordPressPost.model_validate(wp_post(9, "T", "t", excerpt={"rendered": "<p>" + "x" * 600 + "</p>"}))
        article = map_post_to_article(post)

        assert article.excerpt == "x" * 500

    def test_seo_meta_and_sticky(self):
        post = WordPressPost.model_validate(wp_post(
            9, "T", "t",
            meta={"_yoast_wpseo_title": "SEO &amp; title", "_yoast_wpseo_metadesc": "Description"},
            sticky=True
        ))
        article = map_post_to_article(post)

        assert article.meta_title == "SEO & title"
        assert article.meta_description == "Description"
        assert article.featured is True

    def test_featured_media_fields(self):
        post = WordPressPost.model_validate(wp_post(9, "T", "t", featured_media=42))
        media = WordPressMedia(
            id=42,
            source_url="https://blog.test/img.jpg",
            alt_text="A &amp; B",
            title={"rendered": "Image <em>title</em>"},
            caption={"rendered": "<p>Caption</p>"},
            description={"rendered": ""}
        )
        article = map_post_to_article(post, media)

        assert article.featured_image == "https://blog.test/img.jpg"
        assert article.featured_image_alt_text == "A & B"
        assert article.featured_image_title == "Image title"
        assert article.featured_image_caption == "Caption"
        assert article.featured_image_description is None

    def test_no_media(self):
        post = WordPressPost.model_validate(wp_post(9, "T", "t"))
        article = map_post_to_article(post)

        assert article.featured_image is None
        assert article.featured_image_title is None

    def test_lenient_payload_fields(self):
        post = WordPressPost.model_validate(wp_post(9, "T", "t", meta=[], categories=None, featured_media=None))

        assert post.meta == {}
        assert post.categories == []
        assert post.featured_media == 0
