import re

# Canonical course name -> accepted aliases (abbreviations, short names, common variants)
COURSE_ALIASES: dict[str, list[str]] = {
    "Mechanics of Materials": ["MoM", "Mechanics of Material"],
    "Digital Signal Processing": ["DSP"],
    "Electromagnetic Theory": ["EMT"],
    "Ordinary Differential Equations": ["ODE"],
    "Second Language Studies": ["SLS"],
    "Exercise for Machine Shop Practice": ["Machine Shop", "Machine Workshop"],
    "Introduction to C Programming": ["C Programming", "C Prog"],
}


def _names(canonical: str) -> list[str]:
    return [canonical, *COURSE_ALIASES[canonical]]


def resolve_aliases(course_name: str) -> list[str]:
    """
    Every accepted name of the course `course_name` refers to.

    Unknown names resolve to themselves only; a blank name resolves to nothing.
    """
    wanted = course_name.strip().lower()
    if not wanted:
        return []
    for canonical in COURSE_ALIASES:
        if wanted in (name.lower() for name in _names(canonical)):
            return _names(canonical)
    return [course_name.strip()]


def alias_pattern(aliases: list[str]) -> re.Pattern:
    """Case-insensitive regex matching any alias as a whole word or phrase."""
    alternatives = "|".join(re.escape(alias) for alias in sorted(aliases, key=len, reverse=True))
    return re.compile(rf"(?<![A-Za-z0-9])(?:{alternatives})(?![A-Za-z0-9])", re.IGNORECASE)


def canonical_course_for(text: str) -> str | None:
    """Canonical course name mentioned in `text`, if any."""
    for canonical in COURSE_ALIASES:
        if alias_pattern(_names(canonical)).search(text):
            return canonical
    return None
