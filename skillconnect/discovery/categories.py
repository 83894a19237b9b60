"""
skillconnect/discovery/categories.py

Static service-category taxonomy (parent -> subcategories).

Keys are the camelCase identifiers stored on services and job posts. Lookups
normalize case and whitespace so "Cleaning" resolves to `cleaning` and
"Deep Cleaning" resolves to `deepCleaning`.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Category:
    key: str
    label: str
    subcategories: tuple["Category", ...] = field(default_factory=tuple)


def _sub(key: str, label: str) -> Category:
    return Category(key=key, label=label)


CATEGORIES: tuple[Category, ...] = (
    Category(
        "tutoring",
        "Tutoring",
        (
            _sub("math", "Math"),
            _sub("physics", "Physics"),
            _sub("georgian", "Georgian"),
            _sub("english", "English"),
            _sub("russian", "Russian"),
            _sub("otherLanguage", "Other Language"),
            _sub("biology", "Biology"),
            _sub("chemistry", "Chemistry"),
            _sub("geography", "Geography"),
            _sub("history", "History"),
            _sub("elementary", "Elementary"),
        ),
    ),
    Category(
        "cleaning",
        "Cleaning",
        (
            _sub("houseCleaning", "House Cleaning"),
            _sub("deepCleaning", "Deep Cleaning"),
            _sub("officeCleaning", "Office Cleaning"),
        ),
    ),
    Category(
        "handyman",
        "Handyman",
        (
            _sub("electrician", "Electrician"),
            _sub("plumber", "Plumber"),
            _sub("mechanic", "Mechanic"),
            _sub("carpenter", "Carpenter"),
            _sub("painter", "Painter"),
            _sub("plumbing", "Plumbing"),
            _sub("electrical", "Electrical"),
            _sub("generalRepairs", "General Repairs"),
        ),
    ),
    Category("petcare", "Pet Care"),
    Category("gardening", "Gardening"),
    Category("childcare", "Childcare"),
    Category(
        "beautyWellness",
        "Beauty & Wellness",
        (
            _sub("makeupArtist", "Makeup Artist"),
            _sub("massageTherapy", "Massage Therapy"),
            _sub("nailTechnician", "Nail Technician"),
            _sub("personalTrainer", "Personal Trainer"),
            _sub("yogaMeditation", "Yoga & Meditation"),
        ),
    ),
    Category(
        "creativeServices",
        "Creative Services",
        (
            _sub("photography", "Photography"),
            _sub("videography", "Videography"),
            _sub("djMusician", "DJ / Musician"),
        ),
    ),
    Category(
        "eventServices",
        "Event Services",
        (
            _sub("eventPlanning", "Event Planning"),
            _sub("hostHostess", "Host / Hostess"),
            _sub("decorationServices", "Decoration Services"),
        ),
    ),
    Category(
        "techFreelance",
        "Tech & Freelance",
        (
            _sub("websiteCreation", "Website Creation"),
            _sub("graphicDesign", "Graphic Design"),
            _sub("socialMediaManagement", "Social Media Management"),
            _sub("copywritingTranslation", "Copywriting & Translation"),
            _sub("videoEditing", "Video Editing"),
            _sub("appDevelopment", "App Development"),
            _sub("seoAdsSetup", "SEO & Ads Setup"),
        ),
    ),
    Category(
        "transportation",
        "Transportation",
        (
            _sub("driverWithCar", "Driver with Car"),
            _sub("motorcycleCourier", "Motorcycle Courier"),
            _sub("foodPackageDelivery", "Food & Package Delivery"),
            _sub("airportPickup", "Airport Pickup"),
            _sub("carWashing", "Car Washing"),
        ),
    ),
    Category(
        "businessHelp",
        "Business Help",
        (
            _sub("accounting", "Accounting"),
            _sub("adminVirtualAssistant", "Admin / Virtual Assistant"),
            _sub("customerService", "Customer Service"),
            _sub("dataEntry", "Data Entry"),
            _sub("resumeWriting", "Resume Writing"),
            _sub("legalSupport", "Legal Support"),
        ),
    ),
)


def normalize_category(value: str) -> str:
    """Lowercase and drop whitespace: 'Deep Cleaning' -> 'deepcleaning'."""
    return "".join(value.split()).lower()


# normalized key -> normalized keys it covers (itself plus its children)
_EXPANSION: dict[str, frozenset[str]] = {}
# normalized key -> canonical key
_CANONICAL: dict[str, str] = {}

for _parent in CATEGORIES:
    _children = frozenset(normalize_category(c.key) for c in _parent.subcategories)
    _EXPANSION[normalize_category(_parent.key)] = _children | {normalize_category(_parent.key)}
    _CANONICAL[normalize_category(_parent.key)] = _parent.key
    for _child in _parent.subcategories:
        _norm = normalize_category(_child.key)
        _EXPANSION.setdefault(_norm, frozenset({_norm}))
        _CANONICAL.setdefault(_norm, _child.key)


def canonical_category(value: str) -> str | None:
    """Return the taxonomy key matching `value`, or None if it is not a known category."""
    return _CANONICAL.get(normalize_category(value))


def is_known_category(value: str) -> bool:
    return canonical_category(value) is not None


def expand_category(value: str) -> frozenset[str]:
    """
    Normalized keys that satisfy a filter on `value`: the category itself plus
    its subcategories. Unknown values match only themselves.
    """
    norm = normalize_category(value)
    return _EXPANSION.get(norm, frozenset({norm}))


def category_matches(candidate: str | None, selected: str) -> bool:
    if not candidate:
        return False
    return normalize_category(candidate) in expand_category(selected)
