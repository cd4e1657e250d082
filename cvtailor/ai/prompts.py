from __future__ import annotations

KEY_STATUS_PROBE_PROMPT = "Reply with just 'OK'"


def build_contact_prompt(cv_text: str) -> str:
    return (
        "Extract basic contact information from this CV/resume and return it in valid JSON format.\n\n"
        f"CV TEXT:\n{cv_text}\n\n"
        "Return ONLY a valid JSON object with this structure:\n"
        "{\n"
        '  "name": "Full Name",\n'
        '  "email": "email@example.com",\n'
        '  "phone": "phone number",\n'
        '  "location": "city, state/province (only if clearly mentioned)",\n'
        '  "country": "country name if mentioned"\n'
        "}"
    )


def build_cv_parse_prompt(cv_text: str) -> str:
    return f"""Extract detailed structured data from this CV/resume and return it in valid JSON format.
Analyze the content thoroughly and parse dates carefully.

CV TEXT:
{cv_text}

Return ONLY a valid JSON object with this exact structure (no additional text or formatting):
{{
  "name": "Full Name",
  "email": "email@example.com",
  "phone": "phone number",
  "location": "city, state/province",
  "country": "country name if mentioned",
  "summary": "professional summary or objective",
  "experience": [
    {{
      "title": "Job Title",
      "company": "Company Name",
      "start_date": "MM/YYYY or Month Year",
      "end_date": "MM/YYYY, Month Year or 'Present'",
      "duration": "total duration, e.g. 2 years 3 months",
      "description": "job description and key achievements",
      "skills_used": ["skill"],
      "achievements": ["achievement"]
    }}
  ],
  "skills": {{
    "technical": ["languages, tools, technologies"],
    "soft": ["communication, leadership, etc"],
    "certifications": ["certifications mentioned"]
  }},
  "education": [
    {{
      "degree": "Degree Name",
      "institution": "Institution Name",
      "start_date": "Start date",
      "end_date": "End date or 'Present'",
      "year": "Year or duration",
      "gpa": "GPA if mentioned",
      "relevant_courses": ["course"]
    }}
  ],
  "projects": [
    {{
      "name": "Project Name",
      "description": "Project description",
      "technologies": ["tech"],
      "start_date": "Start date",
      "end_date": "End date"
    }}
  ],
  "languages": ["language"],
  "years_of_experience": "estimated total years"
}}"""


def build_semantic_prompt(cv_text: str, job_description: str) -> str:
    return f"""You are an expert ATS analyzer. Analyze the semantic relevance between this CV and job description.

JOB DESCRIPTION:
{job_description}

CV CONTENT:
{cv_text}

Score each criterion from 0 to 100:
1. Technical domain alignment
2. Seniority level matching
3. Industry context
4. Methodology alignment
5. Technology stack coherence
6. Role responsibility overlap

Scoring guide: 90-100 ideal, 80-89 strong with minor gaps, 70-79 good, 60-69 decent,
50-59 significant gaps, below 50 poor match.

Return ONLY this JSON structure:
{{
  "semanticScore": 0,
  "domainAlignment": 0,
  "seniorityMatch": 0,
  "industryFit": 0,
  "methodologyMatch": 0,
  "techStackCoherence": 0,
  "analysis": "2-3 sentences on the alignment, key strengths and gaps"
}}"""


def build_context_prompt(cv_text: str, job_description: str) -> str:
    return f"""You are an expert recruiter evaluating how well a candidate's background fits a specific job context.

JOB POSTING:
{job_description}

CANDIDATE CV:
{cv_text}

Score each area from 0 to 100:
1. Experience level vs requirements
2. Project scale alignment
3. Work environment fit
4. Industry-specific experience
5. Problem-solving approach
6. Career progression logic

Scoring guide: 90-100 exceptional fit, 80-89 strong, 70-79 good with gaps, 60-69 adequate,
50-59 significant adjustments needed, below 50 poor alignment.

Return ONLY this JSON structure:
{{
  "contextScore": 0,
  "experienceAlignment": 0,
  "scaleMatch": 0,
  "environmentFit": 0,
  "industryExperience": 0,
  "problemSolvingFit": 0,
  "insights": "2-3 sentences on contextual fit and key considerations"
}}"""


def build_tailor_prompt(job_description: str, cv_text: str, name: str | None, contact_line: str) -> str:
    return f"""You are an expert resume writer specializing in ATS-optimized resumes.
Rewrite this CV into a professional resume tailored to the job description below.

REQUIREMENTS:
- Rewrite the content to match the job requirements using the exact keywords of the job description.
- Keep employers, job titles, dates, degrees and institutions from the candidate's CV.
- Quantify achievements with numbers and metrics where the CV supports them.
- Focus on impact and results rather than responsibilities.
- Include a KEY PROJECTS section with 2-3 projects, each with exactly 4 bullet points.

FORMATTING:
- Use **bold** for the name, job titles, companies and key metrics.
- ALL CAPS section headers: PROFESSIONAL SUMMARY, CORE COMPETENCIES, PROFESSIONAL EXPERIENCE,
  TECHNICAL PROFICIENCIES, EDUCATION & CERTIFICATIONS, KEY PROJECTS.
- Bullet points start with • and an action verb.
- Single-column, ATS-friendly layout with contact details at the top.

JOB DESCRIPTION:
{job_description}

CANDIDATE'S CV:
{cv_text}

OUTPUT FORMAT:
**{name or '[Full Name]'}**
{contact_line}

PROFESSIONAL SUMMARY
[3-4 lines matching the role, with **key metrics**]

CORE COMPETENCIES
• **[Skill from job]** | **[Technology from job]** | **[Methodology]**

PROFESSIONAL EXPERIENCE
**[Job Title]** | **[Company]** | [Dates]
• [4-5 bullets with quantified outcomes]

TECHNICAL PROFICIENCIES
• **Programming:** [languages]
• **Frameworks:** [frameworks]
• **Tools:** [tools and platforms]

EDUCATION & CERTIFICATIONS
**[Degree]** | **[University]** | [Year]

KEY PROJECTS
**[Project Name]**
• [exactly 4 bullets per project]

Return only the resume as plain text."""
