from handbook_assistant.ranking import rank_sections
from handbook_assistant.segmentation import segment

HANDBOOK = """Welcome to the company.
LEAVE AND TIME OFF
Employees accrue 15 days of paid vacation per year.
Benefits: Health insurance starts on day one.
SECTION 3 Workplace Safety
Report any incident to security within one hour.
"""


if __name__ == "__main__":
    sections = segment(HANDBOOK)
    ranked = rank_sections(["vacation"], sections)
    print(
        {
            "sections": [section.title for section in sections],
            "ranked": [section.title for section in ranked],
        }
    )
