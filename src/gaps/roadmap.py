from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Sequence

import pandas as pd

from src.gaps.analyzer import impact_sort_key
from src.gaps.config import GapAnalysisConfig
from src.gaps.types import (
    AchievabilityCategory,
    Gap,
    GapCategory,
    Recommendation,
    ResourceLink,
    Roadmap,
    RoadmapDiagnostic,
)
from src.normalize.numeric import format_number

logger = logging.getLogger(__name__)

LARGE_VOLUNTEER_GAP_HOURS = 100


@dataclass(frozen=True, slots=True)
class RecommendationTemplate:
    category: GapCategory
    requirement_pattern: str
    text: str
    action_steps: tuple[str, ...]
    resources: tuple[ResourceLink, ...] = ()
    dependencies: tuple[str, ...] = ()

    def matches(self, gap: Gap) -> bool:
        return gap.category is self.category and self.requirement_pattern in gap.requirement


_TEST_PREP_STEPS = (
    "Register for next test date (aim for 2-3 months out)",
    "Complete full-length diagnostic practice test to identify weak areas",
    "Create structured study plan (20-30 hours total over 8-10 weeks)",
    "Use Khan Academy (SAT) or ACT.org resources for free practice",
    "Take at least 3 full-length timed practice tests before test day",
    "Consider test prep course if score gap is significant",
)

# Checked in order; the first template whose pattern occurs in the requirement wins.
RECOMMENDATION_TEMPLATES: tuple[RecommendationTemplate, ...] = (
    RecommendationTemplate(
        GapCategory.ACADEMIC,
        "GPA",
        "Focus on improving your GPA to {target:.1f} through strategic course selection and academic "
        "support resources",
        (
            "Meet with academic advisor to identify GPA improvement strategies",
            "Focus on core courses in your major for grade improvement",
            "Utilize tutoring services and study groups",
            "Consider retaking courses where you earned C or below (if school policy allows)",
            "Maintain consistent study schedule (15-20 hours/week)",
        ),
        (
            ResourceLink(
                "Study Skills Resources",
                "https://learningcenter.unc.edu/tips-and-tools/studying-101-study-smarter-not-harder/",
                "Evidence-based study strategies from UNC Learning Center",
            ),
            ResourceLink(
                "Time Management for Students",
                "https://www.oxfordlearning.com/time-management-strategies-for-students/",
                "Time management strategies to balance coursework",
            ),
        ),
    ),
    RecommendationTemplate(
        GapCategory.ACADEMIC,
        "SAT",
        "Prepare for SAT retake with goal of {target_text}+ through structured test prep and practice exams",
        _TEST_PREP_STEPS,
        (
            ResourceLink(
                "Khan Academy SAT Prep (Free)",
                "https://www.khanacademy.org/sat",
                "Official SAT practice in partnership with College Board",
            ),
            ResourceLink(
                "College Board Practice Tests",
                "https://satsuite.collegeboard.org/sat/practice-preparation",
                "Official full-length SAT practice tests",
            ),
        ),
    ),
    RecommendationTemplate(
        GapCategory.ACADEMIC,
        "ACT",
        "Prepare for ACT retake with goal of {target_text}+ through structured test prep and practice exams",
        _TEST_PREP_STEPS,
        (
            ResourceLink(
                "ACT Test Prep (Free)",
                "https://www.act.org/content/act/en/products-and-services/the-act/test-preparation.html",
                "Official ACT practice materials and resources",
            ),
        ),
    ),
    RecommendationTemplate(
        GapCategory.EXPERIENCE,
        "volunteer hours",
        "Complete {needed_text} additional volunteer hours by committing 4-6 hours per week to a cause you "
        "care about",
        (
            "Research volunteer opportunities on VolunteerMatch.org or local nonprofits",
            "Select 1-2 organizations aligned with your interests/career goals",
            "Contact organizations to schedule regular weekly commitment",
            "Track hours using volunteer tracking app or spreadsheet",
            "Request letter of verification from organization supervisor",
        ),
        (
            ResourceLink(
                "VolunteerMatch",
                "https://www.volunteermatch.org/",
                "Find local volunteer opportunities matched to your interests",
            ),
            ResourceLink(
                "DoSomething.org",
                "https://www.dosomething.org/",
                "Youth-focused volunteer campaigns and service projects",
            ),
            ResourceLink(
                "Local Food Banks & Nonprofits",
                "https://www.feedingamerica.org/find-your-local-foodbank",
                "Search for local food banks and community organizations",
            ),
        ),
    ),
    RecommendationTemplate(
        GapCategory.EXPERIENCE,
        "Leadership",
        "Seek leadership position by running for officer role in 2 clubs you're already active in, or "
        "starting a new club",
        (
            "Identify 2 clubs/organizations you are already involved in",
            "Express interest in officer positions to current leadership",
            "Prepare brief platform/goals statement for election",
            "Run for officer position in next election cycle",
            "Alternative: Start new club aligned with your passion and serve as founding president",
        ),
        (
            ResourceLink(
                "Leadership Skills Development",
                "https://www.mindtools.com/pages/article/newLDR_41.htm",
                "Essential leadership skills and how to develop them",
            ),
            ResourceLink(
                "Starting a School Club",
                "https://www.wikihow.com/Start-a-Club",
                "Step-by-step guide to starting a new club or organization",
            ),
        ),
        ("Join clubs/organizations first before running for officer positions",),
    ),
)

GENERIC_TEXT = "Work toward achieving {requirement} to unlock additional scholarship opportunities"
GENERIC_STEPS = (
    "Research specific requirements for {requirement}",
    "Create action plan with milestones",
    "Seek guidance from school counselor or mentor",
    "Track progress weekly",
)

TIMELINE_TEMPLATES: dict[AchievabilityCategory, str] = {
    AchievabilityCategory.EASY: "{months} {unit} (Easy win - tackle first!)",
    AchievabilityCategory.MODERATE: "{months} {unit} (Moderate effort required)",
    AchievabilityCategory.LONG_TERM: "{months}+ {unit} (Long-term commitment)",
}

if set(TIMELINE_TEMPLATES) != set(AchievabilityCategory):
    raise RuntimeError("TIMELINE_TEMPLATES must cover every achievability category.")


def timeline_description(achievability: AchievabilityCategory, months: int) -> str:
    unit = "months" if months > 1 else "month"
    return TIMELINE_TEMPLATES[achievability].format(months=months, unit=unit)


def target_date_for(today: date, months: int) -> date:
    return (pd.Timestamp(today) + pd.DateOffset(months=months)).date()


def _find_template(gap: Gap) -> RecommendationTemplate | None:
    for template in RECOMMENDATION_TEMPLATES:
        if template.matches(gap):
            return template
    return None


def _numeric(value: object) -> float:
    return float(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else 0.0


def generate_recommendation(gap: Gap, *, today: date) -> Recommendation:
    template = _find_template(gap)
    target = _numeric(gap.target_value)
    if template is None:
        text = GENERIC_TEXT.format(requirement=gap.requirement)
        steps = tuple(step.format(requirement=gap.requirement) for step in GENERIC_STEPS)
        resources: tuple[ResourceLink, ...] = ()
        dependencies: tuple[str, ...] = ()
    else:
        text = template.text.format(
            target=target,
            target_text=format_number(target),
            needed_text=format_number(target - _numeric(gap.current_value)),
        )
        steps = template.action_steps
        resources = template.resources
        dependencies = template.dependencies

    if (
        gap.category is GapCategory.EXPERIENCE
        and "volunteer" in gap.requirement
        and gap.gap_size > LARGE_VOLUNTEER_GAP_HOURS
    ):
        dependencies = dependencies + ("Start with smaller volunteer commitment to find right fit",)

    return Recommendation(
        gap=gap,
        recommendation=text,
        action_steps=steps,
        timeline=timeline_description(gap.achievability, gap.timeline_months),
        target_date=target_date_for(today, gap.timeline_months),
        resources=resources,
        dependencies=dependencies,
    )


def calculate_total_timeline(recommendations: Sequence[Recommendation]) -> int:
    """EASY and MODERATE work runs in parallel; LONG_TERM work is added on top."""

    def longest(tier: AchievabilityCategory) -> int:
        return max(
            (item.gap.timeline_months for item in recommendations if item.gap.achievability is tier),
            default=0,
        )

    parallel = max(longest(AchievabilityCategory.EASY), longest(AchievabilityCategory.MODERATE))
    return parallel + longest(AchievabilityCategory.LONG_TERM)


def check_feasibility(
    recommendations: Sequence[Recommendation],
    config: GapAnalysisConfig,
) -> list[RoadmapDiagnostic]:
    diagnostics: list[RoadmapDiagnostic] = []
    long_term = sum(1 for item in recommendations if item.gap.achievability is AchievabilityCategory.LONG_TERM)
    if long_term > config.long_term_warning_threshold:
        diagnostics.append(
            RoadmapDiagnostic(
                "too_many_long_term_goals",
                f"Student has {long_term} long-term goals. Consider prioritizing top 2-3 for focus.",
                long_term,
            )
        )
    if len(recommendations) > config.total_gap_warning_threshold:
        diagnostics.append(
            RoadmapDiagnostic(
                "too_many_gaps",
                f"Student has {len(recommendations)} gaps to address. "
                "Consider focusing on highest-impact items first.",
                len(recommendations),
            )
        )
    for diagnostic in diagnostics:
        logger.warning("Roadmap feasibility: %s", diagnostic.message)
    return diagnostics


def generate_roadmap(
    gaps: Sequence[Gap],
    *,
    today: date,
    config: GapAnalysisConfig | None = None,
) -> Roadmap:
    active = config or GapAnalysisConfig.baseline()
    recommendations = [generate_recommendation(gap, today=today) for gap in gaps]

    def bucket(tier: AchievabilityCategory) -> tuple[Recommendation, ...]:
        return tuple(item for item in recommendations if item.gap.achievability is tier)

    return Roadmap(
        easy=bucket(AchievabilityCategory.EASY),
        moderate=bucket(AchievabilityCategory.MODERATE),
        long_term=bucket(AchievabilityCategory.LONG_TERM),
        total_timeline_months=calculate_total_timeline(recommendations),
        recommended_sequence=tuple(sorted(recommendations, key=lambda item: impact_sort_key(item.gap))),
        diagnostics=tuple(check_feasibility(recommendations, active)),
    )
