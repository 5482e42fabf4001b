from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from src.normalize.schema import FinancialNeed, Student, StudentProfile

EVAL_TODAY = date(2026, 2, 22)


@dataclass(frozen=True, slots=True)
class GoldenStudent:
    student_id: str
    description: str
    student: Student

    @property
    def profile(self) -> StudentProfile:
        return self.student.require_profile()


def _golden(student_id: str, description: str, date_of_birth: date, profile: StudentProfile) -> GoldenStudent:
    return GoldenStudent(
        student_id=student_id,
        description=description,
        student=Student(student_id=student_id, profile=profile, date_of_birth=date_of_birth),
    )


def get_golden_students() -> list[GoldenStudent]:
    return [
        _golden(
            "golden_ca_cs_strong",
            "California computer science applicant with strong academics and an officer role.",
            date(2008, 3, 14),
            StudentProfile(
                gpa=3.85,
                sat_score=1450,
                class_rank=12,
                class_size=420,
                graduation_year=2026,
                gender="Female",
                ethnicity=("Asian",),
                state="CA",
                city="San Jose",
                citizenship="US Citizen",
                financial_need=FinancialNeed.MODERATE,
                intended_major="Computer Science",
                field_of_study="STEM",
                career_goals="Build responsible machine learning systems for healthcare.",
                extracurriculars=[{"name": "Robotics Club", "role": "Member"}],
                volunteer_hours=120,
                leadership_roles=[{"title": "Robotics Club Captain", "organization": "Robotics Club"}],
                awards_honors=[{"name": "AP Scholar"}],
                completion_percentage=100,
            ),
        ),
        _golden(
            "golden_tx_nursing_gpa_gap",
            "Texas first-generation nursing applicant a few tenths below common GPA floors.",
            date(2007, 11, 2),
            StudentProfile(
                gpa=3.3,
                act_score=24,
                graduation_year=2026,
                gender="Female",
                ethnicity=("Hispanic/Latino",),
                state="TX",
                city="El Paso",
                citizenship="US Citizen",
                financial_need=FinancialNeed.HIGH,
                pell_grant_eligible=True,
                efc_range="0-5000",
                intended_major="Nursing",
                field_of_study="Health Sciences",
                career_goals="Work in underserved rural clinics as a nurse practitioner.",
                extracurriculars=[{"name": "HOSA", "role": "Member"}],
                volunteer_hours=40,
                work_experience=[{"title": "CNA", "start_date": "2024-06-01", "end_date": "2025-06-01"}],
                first_generation=True,
                completion_percentage=90,
            ),
        ),
        _golden(
            "golden_ny_business_no_leadership",
            "New York business applicant with solid scores but no leadership roles.",
            date(2008, 1, 20),
            StudentProfile(
                gpa=3.6,
                sat_score=1280,
                graduation_year=2026,
                gender="Male",
                state="NY",
                city="Buffalo",
                citizenship="US Citizen",
                financial_need=FinancialNeed.LOW,
                intended_major="Business Administration",
                field_of_study="Business",
                career_goals="Launch a sustainable logistics startup.",
                extracurriculars=[{"name": "DECA"}, {"name": "Investment Club"}],
                volunteer_hours=25,
                completion_percentage=80,
            ),
        ),
        _golden(
            "golden_il_engineering_volunteer_gap",
            "Illinois mechanical engineering applicant with low volunteer hours.",
            date(2007, 8, 9),
            StudentProfile(
                gpa=3.1,
                sat_score=1180,
                graduation_year=2026,
                gender="Male",
                ethnicity=("Black/African American",),
                state="IL",
                city="Chicago",
                citizenship="US Citizen",
                financial_need=FinancialNeed.VERY_HIGH,
                pell_grant_eligible=True,
                efc_range="0-2000",
                intended_major="Mechanical Engineering",
                field_of_study="STEM",
                career_goals="Design affordable assistive devices.",
                extracurriculars=[{"name": "Maker Space"}],
                volunteer_hours=10,
                military_affiliation="Veteran Dependent",
                completion_percentage=75,
            ),
        ),
        _golden(
            "golden_az_math_permanent_resident",
            "Arizona mathematics applicant who is a permanent resident.",
            date(2008, 5, 30),
            StudentProfile(
                gpa=3.45,
                act_score=27,
                graduation_year=2026,
                state="AZ",
                city="Tucson",
                citizenship="Permanent Resident",
                financial_need=FinancialNeed.MODERATE,
                intended_major="Mathematics",
                field_of_study="STEM",
                career_goals="Pursue graduate study in biostatistics.",
                extracurriculars=[{"name": "Math Club"}],
                volunteer_hours=60,
                leadership_roles=[{"title": "Math Club Treasurer"}],
                completion_percentage=85,
            ),
        ),
        _golden(
            "golden_nc_psych_sparse",
            "North Carolina psychology applicant with a half-finished profile.",
            date(2008, 9, 12),
            StudentProfile(
                gpa=2.95,
                graduation_year=2026,
                state="NC",
                citizenship="US Citizen",
                intended_major="Psychology",
                completion_percentage=50,
            ),
        ),
    ]
