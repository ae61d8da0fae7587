from redditrss.services.pipeline.filters import FeedFilters, parse_score_limit


class TestFromQuery:
    def test_defaults(self):
        filters = FeedFilters.from_query()
        assert filters == FeedFilters(safe=False, score_limit=None, flair=None)

    def test_safe_is_case_insensitive_true(self):
        assert FeedFilters.from_query(safe="TRUE").safe is True
        assert FeedFilters.from_query(safe="yes").safe is False

    def test_invalid_score_limit_is_ignored(self):
        assert FeedFilters.from_query(score_limit="lots").score_limit is None
        assert parse_score_limit("12") == 12
        assert parse_score_limit("-3") == -3

    def test_score_limit_must_be_a_plain_integer(self):
        assert parse_score_limit("+7") == 7
        for value in [" 10 ", "1_000", "10.0", "", "١٠"]:
            assert parse_score_limit(value) is None
            assert FeedFilters.from_query(score_limit=value).score_limit is None

    def test_empty_flair_disables_filter(self):
        assert FeedFilters.from_query(flair="").flair is None


class TestApply:
    def test_score_limit_keeps_order(self, make_post):
        posts = [make_post(id=f"p{score}", score=score) for score in [1, 5, 10, 15, 20]]

        kept = FeedFilters.from_query(score_limit="10").apply(posts)

        assert [p.score for p in kept] == [10, 15, 20]
        assert [p.id for p in kept] == ["p10", "p15", "p20"]

    def test_unparsable_score_limit_keeps_everything(self, make_post):
        posts = [make_post(id=f"p{score}", score=score) for score in [1, 5, 10]]
        assert FeedFilters.from_query(score_limit="ten").apply(posts) == posts

    def test_safe_excludes_over_18_and_nsfw_flair(self, make_post):
        posts = [
            make_post(id="clean"),
            make_post(id="marked", over_18=True),
            make_post(id="flaired", link_flair_text="NSFW"),
        ]
        kept = FeedFilters(safe=True).apply(posts)
        assert [p.id for p in kept] == ["clean"]

    def test_flair_must_match_exactly(self, make_post):
        posts = [
            make_post(id="a", link_flair_text="News"),
            make_post(id="b", link_flair_text="news"),
            make_post(id="c", link_flair_text=None),
        ]
        kept = FeedFilters(flair="News").apply(posts)
        assert [p.id for p in kept] == ["a"]

    def test_filters_combine_with_and(self, make_post):
        posts = [
            make_post(id="a", score=50, link_flair_text="News"),
            make_post(id="b", score=5, link_flair_text="News"),
            make_post(id="c", score=50, link_flair_text="News", over_18=True),
            make_post(id="d", score=50, link_flair_text="Meme"),
        ]
        kept = FeedFilters(safe=True, score_limit=10, flair="News").apply(posts)
        assert [p.id for p in kept] == ["a"]
