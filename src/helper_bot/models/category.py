"""Request categories and their status vocabularies."""

from dataclasses import dataclass
from enum import StrEnum


class Category(StrEnum):
    """Kind of request; selects the backing database and status set."""

    FEATURE = "feature"
    BUSINESS_DEVELOPMENT = "bd"


@dataclass(frozen=True)
class CategoryProfile:
    """Static description of one request category."""

    category: Category
    label: str
    statuses: tuple[str, ...]
    terminal_status: str
    markers: tuple[str, ...] = ()

    @property
    def key(self) -> str:
        """Short name used in replies and commands (e.g. "bd")."""
        return self.category.value

    @property
    def initial_status(self) -> str:
        """Status assigned to newly created records."""
        return self.statuses[0]

    def canonical_status(self, text: str) -> str | None:
        """Return the canonically-cased status matching text, if any.

        Matching is case-insensitive and exact after trimming.
        """
        wanted = text.strip().lower()
        for status in self.statuses:
            if status.lower() == wanted:
                return status
        return None


FEATURE_PROFILE = CategoryProfile(
    category=Category.FEATURE,
    label="Feature",
    statuses=("New", "In Progress", "Pending Review", "Completed", "Rejected"),
    terminal_status="Completed",
)

BUSINESS_DEVELOPMENT_PROFILE = CategoryProfile(
    category=Category.BUSINESS_DEVELOPMENT,
    label="BD",
    statuses=("Not in CRM yet", "Added to CRM"),
    terminal_status="Added to CRM",
    markers=("bd", "business development"),
)

CATEGORY_PROFILES: dict[Category, CategoryProfile] = {
    Category.FEATURE: FEATURE_PROFILE,
    Category.BUSINESS_DEVELOPMENT: BUSINESS_DEVELOPMENT_PROFILE,
}


def get_profile(category: Category) -> CategoryProfile:
    """Look up the profile for a category."""
    return CATEGORY_PROFILES[category]


def detect_category(text: str) -> Category:
    """Pick the category named in free text.

    Any business-development marker anywhere in the text wins; everything
    else is a feature request. Substring based, so "bd" inside another word
    also counts.
    """
    lowered = text.lower()
    if any(marker in lowered for marker in BUSINESS_DEVELOPMENT_PROFILE.markers):
        return Category.BUSINESS_DEVELOPMENT
    return Category.FEATURE
