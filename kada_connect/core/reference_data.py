"""Static reference collections used for profile classification and lookup endpoints.

Collections are normalized once when the catalog is built: whitespace is
collapsed, duplicates are removed case-insensitively (first spelling wins) and
definition order is preserved.
"""
from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Iterable


INDUSTRIES = [
    "Information Technology",
    "Software Development",
    "Financial Services",
    "Fintech",
    "E-commerce",
    "Banking",
    "Telecommunications",
    "Healthcare",
    "Education",
    "Edtech",
    "Manufacturing",
    "Retail",
    "Logistics",
    "Transportation",
    "Media & Entertainment",
    "Gaming",
    "Consulting",
    "Government",
    "Energy",
    "Agriculture",
    "Real Estate",
    "Hospitality",
    "Insurance",
    "Automotive",
    "Non-profit",
]

TECH_ROLES = [
    ("Frontend Developer", "Frontend"),
    ("React Developer", "Frontend"),
    ("UI Engineer", "Frontend"),
    ("Backend Developer", "Backend"),
    ("Java Developer", "Backend"),
    ("Python Developer", "Backend"),
    ("Node.js Developer", "Backend"),
    ("Full Stack Developer", "Full Stack"),
    ("Mobile Developer", "Mobile"),
    ("Android Developer", "Mobile"),
    ("iOS Developer", "Mobile"),
    ("Flutter Developer", "Mobile"),
    ("Data Analyst", "Data"),
    ("Data Engineer", "Data"),
    ("Data Scientist", "Data"),
    ("Machine Learning Engineer", "AI/ML"),
    ("AI Engineer", "AI/ML"),
    ("DevOps Engineer", "DevOps"),
    ("Cloud Engineer", "DevOps"),
    ("Site Reliability Engineer", "DevOps"),
    ("QA Engineer", "Quality Assurance"),
    ("Test Automation Engineer", "Quality Assurance"),
    ("UI/UX Designer", "Design"),
    ("Product Designer", "Design"),
    ("Product Manager", "Product"),
    ("Project Manager", "Product"),
    ("Cybersecurity Analyst", "Security"),
    ("Security Engineer", "Security"),
    ("Game Developer", "Game Development"),
    ("Embedded Systems Engineer", "Hardware"),
]

UNIVERSITIES = [
    "Universitas Indonesia",
    "Institut Teknologi Bandung",
    "Universitas Gadjah Mada",
    "Institut Teknologi Sepuluh Nopember",
    "Universitas Airlangga",
    "Institut Pertanian Bogor",
    "Universitas Padjadjaran",
    "Universitas Diponegoro",
    "Universitas Brawijaya",
    "Universitas Bina Nusantara",
    "Universitas Telkom",
    "Universitas Hasanuddin",
    "Universitas Sumatera Utara",
    "Universitas Udayana",
    "Universitas Pelita Harapan",
    "Universitas Multimedia Nusantara",
    "Universitas Gunadarma",
    "Universitas Sebelas Maret",
    "Universitas Negeri Jakarta",
    "Universitas Andalas",
]

MAJORS = [
    "Computer Science",
    "Information Systems",
    "Information Technology",
    "Software Engineering",
    "Computer Engineering",
    "Electrical Engineering",
    "Data Science",
    "Mathematics",
    "Statistics",
    "Physics",
    "Industrial Engineering",
    "Business Information Systems",
    "Informatics",
    "Visual Communication Design",
    "Management",
    "Accounting",
    "Economics",
]

TECH_SKILLS = [
    "JavaScript",
    "TypeScript",
    "Python",
    "Java",
    "Kotlin",
    "Swift",
    "Go",
    "PHP",
    "C",
    "C++",
    "C#",
    "Dart",
    "Ruby",
    "Rust",
    "SQL",
    "HTML",
    "CSS",
    "React",
    "Next.js",
    "Vue.js",
    "Angular",
    "Svelte",
    "Tailwind CSS",
    "Node.js",
    "Express.js",
    "NestJS",
    "Django",
    "Flask",
    "FastAPI",
    "Spring Boot",
    "Laravel",
    "Flutter",
    "React Native",
    "PostgreSQL",
    "MySQL",
    "MongoDB",
    "Redis",
    "Firebase",
    "Supabase",
    "GraphQL",
    "REST API",
    "Docker",
    "Kubernetes",
    "AWS",
    "Google Cloud",
    "Microsoft Azure",
    "Terraform",
    "Git",
    "Linux",
    "CI/CD",
    "Pandas",
    "NumPy",
    "scikit-learn",
    "TensorFlow",
    "PyTorch",
    "Power BI",
    "Tableau",
    "Figma",
    "Selenium",
    "Jest",
    "Unity",
]

# Seed list served by the suggestions endpoint when no query is given
POPULAR_TECH_SKILLS = [
    "JavaScript",
    "Python",
    "React",
    "Node.js",
    "SQL",
    "Java",
    "TypeScript",
    "HTML",
    "CSS",
    "Git",
    "Docker",
    "Flutter",
    "Laravel",
    "PostgreSQL",
    "MongoDB",
    "Figma",
    "AWS",
    "Django",
    "Kotlin",
    "Next.js",
]

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(value) -> str:
    """Trim and collapse internal whitespace; non-strings normalize to ''."""
    if not isinstance(value, str):
        return ""
    return _WHITESPACE_RE.sub(" ", value.strip())


def dedupe(values: Iterable[str]) -> tuple[str, ...]:
    """Normalize and deduplicate case-insensitively, keeping first spelling and order."""
    seen: set[str] = set()
    result = []
    for value in values:
        normalized = normalize_text(value)
        if not normalized or normalized.lower() in seen:
            continue
        seen.add(normalized.lower())
        result.append(normalized)
    return tuple(result)


@dataclass(frozen=True)
class TechRole:
    name: str
    category: str

    def to_dict(self) -> dict:
        return {"name": self.name, "category": self.category}


@dataclass(frozen=True)
class ReferenceCatalog:
    """Immutable set of reference collections, built once per process."""
    industries: tuple[str, ...]
    tech_roles: tuple[TechRole, ...]
    universities: tuple[str, ...]
    majors: tuple[str, ...]
    tech_skills: tuple[str, ...]
    popular_tech_skills: tuple[str, ...]
    tech_role_categories: tuple[str, ...] = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "tech_role_categories", dedupe(role.category for role in self.tech_roles))

    @classmethod
    def build(
        cls,
        industries: Iterable[str] = INDUSTRIES,
        tech_roles: Iterable[tuple[str, str]] = TECH_ROLES,
        universities: Iterable[str] = UNIVERSITIES,
        majors: Iterable[str] = MAJORS,
        tech_skills: Iterable[str] = TECH_SKILLS,
        popular_tech_skills: Iterable[str] = POPULAR_TECH_SKILLS,
    ) -> "ReferenceCatalog":
        """Build a normalized catalog; defaults to the bundled collections."""
        seen_roles: set[str] = set()
        roles = []
        for name, category in tech_roles:
            name = normalize_text(name)
            if not name or name.lower() in seen_roles:
                continue
            seen_roles.add(name.lower())
            roles.append(TechRole(name=name, category=normalize_text(category) or "Other"))

        skills = dedupe(tech_skills)
        known_skills = {skill.lower(): skill for skill in skills}
        # Seed entries must come from the master list, in its canonical spelling
        popular = dedupe(
            known_skills[skill.lower()]
            for skill in dedupe(popular_tech_skills)
            if skill.lower() in known_skills
        )

        return cls(
            industries=dedupe(industries),
            tech_roles=tuple(roles),
            universities=dedupe(universities),
            majors=dedupe(majors),
            tech_skills=skills,
            popular_tech_skills=popular,
        )
