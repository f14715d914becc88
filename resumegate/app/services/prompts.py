"""Prompt templates for resume analysis."""

JOB_MATCH_PROMPT = """\
Analyze the following resume and job description. Provide:
  1. A match score (percentage)
  2. Keywords present in both the resume and job description
  3. Keywords missing from the resume but present in the job description
  4. Section-specific suggestions for improving the resume (skills, experience, education, projects)

Resume:
{resume}

Job Description:
{job_description}

Respond with a JSON object in the following format, without any additional text or formatting:
{{
  "score": number,
  "presentKeywords": string[],
  "missingKeywords": string[],
  "suggestions": {{
    "skills": string[],
    "experience": string[],
    "education": string[],
    "projects": string[]
  }}
}}

The score should be an integer between 0 and 100. Provide concise, actionable suggestions for each section.
"""

RESUME_OPTIMIZE_PROMPT = """\
Analyze the following resume and job description. Provide suggestions to optimize the resume for this specific job. Structure your response in the following JSON format:

{{
  "analysis": [
    {{"title": "Summary", "content": "A brief overview of the analysis"}},
    {{"title": "Key Skills Match", "content": ["Skill 1", "Skill 2", "Skill 3"]}},
    {{"title": "Experience Alignment", "content": ["Suggestion 1", "Suggestion 2", "Suggestion 3"]}},
    {{"title": "Areas for Improvement", "content": ["Area 1", "Area 2", "Area 3"]}},
    {{"title": "Additional Recommendations", "content": "Any other suggestions for improving the resume"}}
  ]
}}

Resume:
{resume}

Job Description:
{job_description}

Provide your analysis and suggestions in the specified JSON format. Do not include any additional text or formatting outside of the JSON structure.
"""


def build_job_match_prompt(resume: str, job_description: str) -> str:
    return JOB_MATCH_PROMPT.format(resume=resume, job_description=job_description)


def build_resume_optimize_prompt(resume: str, job_description: str) -> str:
    return RESUME_OPTIMIZE_PROMPT.format(resume=resume, job_description=job_description)
