"""Lookup service: reference lists, search, suggestions and popularity rankings.

The service is read-only with respect to profiles. Popularity rankings scan
the profile store on every cache miss (O(items x profiles)); results are kept
in the owned LookupCache for one TTL window and are not invalidated when
profiles change.
"""
from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Protocol

from kada_connect.core.cache import LookupCache
from kada_connect.core.errors import UpstreamError
from kada_connect.core.matching import rank_matches, split_multi_value
from kada_connect.core.reference_data import ReferenceCatalog, normalize_text
from kada_connect.core.validators import (
    validate_category,
    validate_limit,
    validate_optional_query,
    validate_search_query,
)

logger = logging.getLogger(__name__)

DEFAULT_POPULAR_LIMIT = 10
DEFAULT_POPULAR_SKILLS_LIMIT = 20
DEFAULT_SUGGESTION_LIMIT = 20

ALL_LOOKUP_DATA_KEY = "all-lookup-data"
POPULAR_INDUSTRIES_KEY = "popular-industries"
POPULAR_TECH_ROLES_KEY = "popular-tech-roles"
POPULAR_TECH_SKILLS_KEY = "popular-tech-skills"
POPULAR_UNIVERSITIES_KEY = "popular-universities"
POPULAR_MAJORS_KEY = "popular-majors"
POPULAR_PREFERRED_INDUSTRIES_KEY = "popular-preferred-industries"


class ProfileSource(Protocol):
    """What the lookup service needs from the profile store."""

    def list_companies(self) -> list[dict]: ...

    def list_students(self, open_to_work_only: bool = False) -> list[dict]: ...


def rank_by_popularity(names: Iterable[str], profiles: Iterable[dict], field: str) -> list[dict]:
    """Count how many profiles reference each name, most referenced first.

    Matching is case-insensitive; each profile counts at most once per name.
    Ties keep the order of ``names``; names nobody references are dropped.
    """
    names = list(names)
    index = {name.lower(): position for position, name in enumerate(names)}
    counts = [0] * len(names)

    for profile in profiles:
        referenced = {
            index[value.lower()]
            for value in split_multi_value(profile.get(field))
            if value.lower() in index
        }
        for position in referenced:
            counts[position] += 1

    ranked = sorted(
        (position for position, count in enumerate(counts) if count > 0),
        key=lambda position: (-counts[position], position),
    )
    return [{"name": names[position], "count": counts[position]} for position in ranked]


class LookupService:
    """Answers lookup queries over a reference catalog and a profile source."""

    def __init__(
        self,
        catalog: ReferenceCatalog,
        profiles: ProfileSource,
        cache: Optional[LookupCache] = None,
        search_limit: int = 10,
    ):
        self.catalog = catalog
        self.profiles = profiles
        self.cache = cache if cache is not None else LookupCache()
        self.search_limit = search_limit
        self.cache_warmed = False

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    def get_industries(self) -> list[str]:
        return list(self.catalog.industries)

    def get_tech_roles(self) -> list[dict]:
        return [role.to_dict() for role in self.catalog.tech_roles]

    def get_tech_role_categories(self) -> list[str]:
        return list(self.catalog.tech_role_categories)

    def get_universities(self) -> list[str]:
        return list(self.catalog.universities)

    def get_majors(self) -> list[str]:
        return list(self.catalog.majors)

    def get_tech_skills(self) -> list[str]:
        return list(self.catalog.tech_skills)

    def get_tech_roles_by_category(self, category) -> list[dict]:
        """Roles whose category matches case-insensitively; [] for unknown categories."""
        wanted = validate_category(category).lower()
        return [role.to_dict() for role in self.catalog.tech_roles if role.category.lower() == wanted]

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search_industries(self, query) -> list[str]:
        return rank_matches(self.catalog.industries, validate_search_query(query), self.search_limit)

    def search_tech_roles(self, query) -> list[dict]:
        roles = rank_matches(
            self.catalog.tech_roles,
            validate_search_query(query),
            self.search_limit,
            key=lambda role: role.name,
        )
        return [role.to_dict() for role in roles]

    def search_universities(self, query) -> list[str]:
        return rank_matches(self.catalog.universities, validate_search_query(query), self.search_limit)

    def search_majors(self, query) -> list[str]:
        return rank_matches(self.catalog.majors, validate_search_query(query), self.search_limit)

    def get_tech_skill_suggestions(self, query=None, limit=DEFAULT_SUGGESTION_LIMIT) -> list[str]:
        """Ranked skill suggestions; the curated seed list when no query is given."""
        limit = validate_limit(limit, DEFAULT_SUGGESTION_LIMIT)
        query = validate_optional_query(query)
        if query is None:
            return list(self.catalog.popular_tech_skills[:limit])
        return rank_matches(self.catalog.tech_skills, query, limit)

    def validate_tech_skills(self, skills: list) -> dict:
        """Classify each candidate skill as recognized or not.

        Non-string entries are reported as unrecognized rather than failing
        the request. Recognized entries carry the canonical spelling.
        """
        known = {skill.lower(): skill for skill in self.catalog.tech_skills}
        results = []
        for candidate in skills:
            match = None
            if isinstance(candidate, str):
                match = known.get(normalize_text(candidate).lower())
            results.append({"input": candidate, "valid": match is not None, "match": match})

        return {
            "valid": all(result["valid"] for result in results),
            "results": results,
            "recognized": [result["match"] for result in results if result["valid"]],
            "unrecognized": [result["input"] for result in results if not result["valid"]],
        }

    # ------------------------------------------------------------------
    # Popularity
    # ------------------------------------------------------------------

    def _fetch(self, loader: Callable[[], list[dict]], view: str) -> list[dict]:
        try:
            return loader()
        except Exception as exc:
            logger.error("Profile store failure while computing %s: %s", view, exc)
            raise UpstreamError(f"Failed to retrieve profile data for {view}") from exc

    def _ranking(self, key: str, compute: Callable[[], list[dict]]) -> list[dict]:
        return self.cache.get_or_compute(key, compute)

    def _company_ranking(self, names, field: str, view: str) -> list[dict]:
        companies = self._fetch(self.profiles.list_companies, view)
        return rank_by_popularity(names, companies, field)

    def _student_ranking(self, names, field: str, view: str) -> list[dict]:
        students = self._fetch(lambda: self.profiles.list_students(open_to_work_only=True), view)
        return rank_by_popularity(names, students, field)

    def popular_industries_ranking(self) -> list[dict]:
        return self._ranking(POPULAR_INDUSTRIES_KEY, lambda: self._company_ranking(
            self.catalog.industries, "industry_sector", "popular industries"))

    def popular_tech_roles_ranking(self) -> list[dict]:
        def compute():
            ranking = self._company_ranking(
                [role.name for role in self.catalog.tech_roles], "tech_roles_interest", "popular tech roles")
            categories = {role.name: role.category for role in self.catalog.tech_roles}
            return [dict(item, category=categories[item["name"]]) for item in ranking]
        return self._ranking(POPULAR_TECH_ROLES_KEY, compute)

    def popular_tech_skills_ranking(self) -> list[dict]:
        return self._ranking(POPULAR_TECH_SKILLS_KEY, lambda: self._student_ranking(
            self.catalog.tech_skills, "tech_stack_skills", "popular tech skills"))

    def popular_universities_ranking(self) -> list[dict]:
        return self._ranking(POPULAR_UNIVERSITIES_KEY, lambda: self._student_ranking(
            self.catalog.universities, "university_institution", "popular universities"))

    def popular_majors_ranking(self) -> list[dict]:
        return self._ranking(POPULAR_MAJORS_KEY, lambda: self._student_ranking(
            self.catalog.majors, "program_major", "popular majors"))

    def popular_preferred_industries_ranking(self) -> list[dict]:
        """Catalog industries ranked by how many open-to-work students prefer them."""
        return self._ranking(POPULAR_PREFERRED_INDUSTRIES_KEY, lambda: self._student_ranking(
            self.catalog.industries, "preferred_industry", "popular preferred industries"))

    def get_popular_industries(self, limit=DEFAULT_POPULAR_LIMIT) -> list[dict]:
        return self.popular_industries_ranking()[:validate_limit(limit, DEFAULT_POPULAR_LIMIT)]

    def get_popular_tech_roles(self, limit=DEFAULT_POPULAR_LIMIT) -> list[dict]:
        return self.popular_tech_roles_ranking()[:validate_limit(limit, DEFAULT_POPULAR_LIMIT)]

    def get_popular_tech_skills(self, limit=DEFAULT_POPULAR_SKILLS_LIMIT) -> list[dict]:
        return self.popular_tech_skills_ranking()[:validate_limit(limit, DEFAULT_POPULAR_SKILLS_LIMIT)]

    def get_popular_universities(self, limit=DEFAULT_POPULAR_LIMIT) -> list[dict]:
        return self.popular_universities_ranking()[:validate_limit(limit, DEFAULT_POPULAR_LIMIT)]

    def get_popular_majors(self, limit=DEFAULT_POPULAR_LIMIT) -> list[dict]:
        return self.popular_majors_ranking()[:validate_limit(limit, DEFAULT_POPULAR_LIMIT)]

    def get_popular_preferred_industries(self, limit=DEFAULT_POPULAR_LIMIT) -> list[dict]:
        return self.popular_preferred_industries_ranking()[:validate_limit(limit, DEFAULT_POPULAR_LIMIT)]

    # ------------------------------------------------------------------
    # Aggregate and cache management
    # ------------------------------------------------------------------

    def get_all_lookup_data(self) -> dict:
        """Every list, category and popular-N view in one cached payload."""
        def compute():
            return {
                "industries": self.get_industries(),
                "techRoles": self.get_tech_roles(),
                "techRoleCategories": self.get_tech_role_categories(),
                "techSkills": self.get_tech_skills(),
                "universities": self.get_universities(),
                "majors": self.get_majors(),
                "popular": {
                    "industries": self.get_popular_industries(),
                    "techRoles": self.get_popular_tech_roles(),
                    "techSkills": self.get_popular_tech_skills(),
                    "universities": self.get_popular_universities(),
                    "majors": self.get_popular_majors(),
                    "preferredIndustries": self.get_popular_preferred_industries(),
                },
                "generatedAt": datetime.now(timezone.utc).isoformat(),
            }
        return self.cache.get_or_compute(ALL_LOOKUP_DATA_KEY, compute)

    def warm_cache(self) -> bool:
        """Precompute every cached view. Failures are logged, not raised."""
        try:
            self.get_all_lookup_data()
        except UpstreamError as exc:
            logger.warning("Lookup cache warm-up failed: %s", exc)
            return False
        self.cache_warmed = True
        logger.info("Lookup cache warmed (%d entries)", len(self.cache))
        return True

    def clear_cache(self) -> dict:
        dropped = self.cache.clear()
        self.cache_warmed = False
        logger.info("Lookup cache cleared (%d entries dropped)", dropped)
        return {"cleared": dropped}

    def get_cache_status(self) -> dict:
        status = self.cache.status()
        status["warmed"] = self.cache_warmed
        return status


def build_lookup_service(profiles: ProfileSource, ttl_seconds: int = 300, search_limit: int = 10) -> LookupService:
    """Wire a service with the bundled catalog and a fresh cache."""
    return LookupService(
        catalog=ReferenceCatalog.build(),
        profiles=profiles,
        cache=LookupCache(ttl_seconds=ttl_seconds),
        search_limit=search_limit,
    )


__all__ = [
    "LookupService",
    "ProfileSource",
    "build_lookup_service",
    "rank_by_popularity",
]
