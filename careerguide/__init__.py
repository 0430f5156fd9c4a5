"""
Career Guidance Portal
Connects students, learning institutions, companies and administrators.

Architecture:
- PostgreSQL: Structured records (users, institutions, courses, jobs, applications)
- MongoDB: Student profile documents (academic records, certificates, experience, skills)
- Matching core: candidate scoring, ranking and batch admissions
"""

__version__ = "1.0.0"
