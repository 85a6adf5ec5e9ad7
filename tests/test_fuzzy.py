"""Tests for fuzzy matching and host filtering."""

from pssh.selector.fuzzy import filter_hosts, find, score
from pssh.types import Host


def is_subsequence(pattern: str, target: str) -> bool:
    it = iter(target.lower())
    return all(ch in it for ch in pattern.lower())


HOSTS = [
    Host(name="web1", hostname="10.0.0.5", user="deploy"),
    Host(name="db1", hostname="10.0.0.9", port="5432"),
    Host(name="bastion", aliases="(jump)", hostname="bastion.example.com"),
    Host(name="web2", hostname="10.0.0.6"),
]


class TestScore:
    def test_no_match(self):
        assert score("xyz", "web1") is None

    def test_empty_pattern_has_no_score(self):
        assert score("", "web1") is None

    def test_matched_indexes(self):
        total, indexes = score("wb", "web1")
        assert indexes == (0, 2)

    def test_case_insensitive(self):
        assert score("WEB", "web1") is not None
        assert score("web", "WebServer") is not None

    def test_order_matters(self):
        assert score("bw", "web") is None

    def test_prefix_beats_scattered(self):
        prefix, _ = score("web", "web1")
        scattered, _ = score("web", "xwxexb")
        assert prefix > scattered

    def test_separator_bonus(self):
        after_separator, _ = score("b", "prod-bx")
        mid_word, _ = score("b", "prodxbx")
        assert after_separator > mid_word


class TestFind:
    def test_best_first(self):
        matches = find("web", ["xwxexb", "web1"])
        assert [m.string for m in matches] == ["web1", "xwxexb"]
        assert [m.index for m in matches] == [1, 0]

    def test_ties_keep_input_order(self):
        matches = find("a", ["ab", "ac", "ad"])
        assert [m.string for m in matches] == ["ab", "ac", "ad"]

    def test_drops_non_matches(self):
        assert [m.string for m in find("z", ["ab", "zz"])] == ["zz"]


class TestFilterHosts:
    def test_empty_query_is_identity(self):
        assert filter_hosts(HOSTS, "") == HOSTS

    def test_db_scenario(self):
        result = filter_hosts(HOSTS, "db")

        assert result[0].name == "db1"
        assert all(h.name != "web1" for h in result)

    def test_every_result_matches_as_subsequence(self):
        for query in ["w", "web", "10.0", "jump", "deploy", "5432", "b1"]:
            result = filter_hosts(HOSTS, query)
            for host in result:
                assert is_subsequence(query, host.searchable())
            for host in HOSTS:
                if host not in result:
                    assert not is_subsequence(query, host.searchable())

    def test_searches_aliases_user_and_port(self):
        assert [h.name for h in filter_hosts(HOSTS, "jump")] == ["bastion"]
        assert [h.name for h in filter_hosts(HOSTS, "deploy")] == ["web1"]
        assert [h.name for h in filter_hosts(HOSTS, "5432")] == ["db1"]

    def test_no_match_gives_empty(self):
        assert filter_hosts(HOSTS, "qqq") == []
