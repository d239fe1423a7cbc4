"""mock_resume_generator.py
Builds realistic résumé texts (and RawFiles) that simulate uploaded documents.
"""
import copy
import textwrap
from dataclasses import dataclass
from typing import List, Optional

from src.models import RawFile
from src.test_helpers.file_parsing import make_text_file

DEFAULT_SECTION_ORDER = [
    "contact_info",
    "summary",
    "work_experience",
    "education",
    "projects",
    "skills",
]

# -------------------------------------------------------------------------
# DUMMY RESUME SECTIONS (to construct resumes from)
# First example of each list is the default used
# -------------------------------------------------------------------------
DUMMY_RESUME_SECTIONS = {
    "contact_info": [
        """
        CONTACT
        {name}
        Greater New York Area | {phone} | {email}
        """,

        """
        Contact Information:
        {name}
        {email}
        """,
    ],

    "summary": [
        """
        SUMMARY
        Product leader with eight years of experience shipping analytics tools.
        """,

        """
        Professional Profile:
        Data scientist focused on experimentation and forecasting.
        """,
    ],

    "work_experience": [
        """
        WORK EXPERIENCE
        Director of Product Management at {company_name}
        May 2018 - current Colorado Springs, CO
        - Streamlined customer support process using SysAid ticket management.
        - Upsold Comcast products and services to inbound callers.
        """,

        """
        Employment History:
        Data Scientist at {company_name}, San Diego, CA
        1. Pioneered segmentation in Google Analytics.
        2. Automated weekly reporting pipelines.
        """,
    ],

    "education": [
        """
        EDUCATION
        M.S. Computer Science, San Diego State University
        February 2016 - June 2018
        """,

        """
        Education:
        M.A. English, University of Texas at San Antonio
        """,
    ],

    "projects": [
        """
        PROJECTS
        h2oFiltration, group member in 2021
        - Designed a water filtration system
        """,

        """
        Portfolio:
        Editor for Cultural Studies quarterly, San Antonio, TX
        """,
    ],

    "skills": [
        """
        SKILLS
        {skills}
        """,

        """
        Technical Skills:
        {skills}
        """,
    ],
}


# -------------------------------------------------------------------------
# MockResumeGenerator INPUT DATA MODELS
# -------------------------------------------------------------------------
@dataclass
class ResumeValues:
    """
    Holds fillable field values that can be overridden when
    generating a mock resume.

    Attributes:
        name: Default person name.
        email: Default email address.
        phone: Default phone number.
        skills: Default skills line for the skills section.
        company_name: Default company name for work experience.
    """
    name: str = "John Doe"
    email: str = "john.doe@example.com"
    phone: str = "123-456-7890"
    skills: str = "Python, SQL, Power BI, Data Cleaning"
    company_name: str = "Comcast"


@dataclass
class SectionTemplates:
    """
    Defines the text templates used to render each section of the
    resume. Templates can include `str.format()` placeholders such as
    `{name}` or `{skills}`.
    """
    contact_info: str = DUMMY_RESUME_SECTIONS["contact_info"][0]
    summary: str = DUMMY_RESUME_SECTIONS["summary"][0]
    work_experience: str = DUMMY_RESUME_SECTIONS["work_experience"][0]
    education: str = DUMMY_RESUME_SECTIONS["education"][0]
    projects: str = DUMMY_RESUME_SECTIONS["projects"][0]
    skills: str = DUMMY_RESUME_SECTIONS["skills"][0]


# -------------------------------------------------------------------------
# Main generator class
# -------------------------------------------------------------------------
class MockResumeGenerator:
    """
    Generate realistic mock resumes for testing purposes.

    Sections are rendered from templates, dedented, filled with
    ``ResumeValues`` and joined by blank lines.

    Attributes:
        values (ResumeValues): Fillable field values for substitution.
        templates (SectionTemplates): Templates for each resume section.
        section_order (List[str]): The sequence of sections to include.
    """

    def __init__(
        self,
        values: Optional[ResumeValues] = None,
        templates: Optional[SectionTemplates] = None,
        section_order: Optional[List[str]] = None,
    ):
        self.values = values or ResumeValues()
        self.templates = templates or SectionTemplates()
        self.section_order = DEFAULT_SECTION_ORDER if section_order is None else section_order

    def _render(self, section: str) -> str:
        template = textwrap.dedent(getattr(self.templates, section)).strip()
        return template.format(**vars(self.values))

    def generate(self) -> str:
        """Build the resume text."""
        return "\n\n".join(
            self._render(section)
            for section in self.section_order
            if hasattr(self.templates, section)
        )

    def generate_raw_file(self, filename: str = "resume.txt") -> RawFile:
        """Build the resume and wrap it as an uploaded plain-text file."""
        return make_text_file(self.generate(), filename=filename)

    def clone(
        self,
        values: Optional[ResumeValues] = None,
        templates: Optional[SectionTemplates] = None,
        section_order: Optional[List[str]] = None,
    ) -> "MockResumeGenerator":
        """Create a copy of this generator, optionally overriding specific attributes."""
        new_gen = copy.deepcopy(self)
        if values is not None:
            new_gen.values = values
        if templates is not None:
            new_gen.templates = templates
        if section_order is not None:
            new_gen.section_order = section_order
        return new_gen


MOCK_RESUME_GENERATOR_0 = MockResumeGenerator()
