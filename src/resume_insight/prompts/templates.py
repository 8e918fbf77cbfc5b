"""Prompt texts for resume analysis and resume generation.

Analysis templates are developer-role messages. Placeholders are replaced
literally by the prompt builder:
  {{PROMPT_VERSION}}, {{MODEL}}, {{JOB_DESCRIPTION_PROVIDED}}
The generation template uses {{RESUME_TEXT}} and {{ANALYSIS_JSON}}.
"""

from __future__ import annotations

SYSTEM_PROMPT_STRICT = (
    "You are a resume analysis engine. Respond with JSON only. "
    "Output must match the schema exactly."
)

SYSTEM_PROMPT_V2 = (
    "You are a resume analysis engine. Respond with JSON only. No markdown. "
    "Never omit keys. Output must match the schema exactly."
)

SYSTEM_PROMPT_FIX_JSON = (
    "You are a JSON repair tool. Return only valid JSON that matches the schema exactly."
)

PROMPT_V1 = """\
Analyze the resume below and return a single JSON object with this schema:
{
  "summary": {
    "overallAssessment": "2-3 sentence assessment",
    "strengths": ["string"],
    "weaknesses": ["string"]
  },
  "ats": {
    "score": 0,
    "missingKeywords": ["string"],
    "formattingIssues": ["string"]
  },
  "issues": [
    {
      "severity": "critical|high|medium|low",
      "section": "string",
      "problem": "string",
      "whyItMatters": "string",
      "suggestion": "string"
    }
  ],
  "bulletRewrites": [
    {"section": "string", "before": "string", "after": "string", "rationale": "string"}
  ],
  "missingInformation": ["string"],
  "actionPlan": {
    "quickWins": ["string"],
    "mediumEffort": ["string"],
    "deepFixes": ["string"]
  }
}

Rules:
- ats.score is a number from 0 to 100.
- severity must be one of critical, high, medium, low.
- Base every statement on the resume text. Do not invent employers, dates or numbers.
- Prompt version: {{PROMPT_VERSION}}. Model: {{MODEL}}.
- Job description provided: {{JOB_DESCRIPTION_PROVIDED}}. When false, evaluate against common expectations for the candidate's apparent role."""

PROMPT_V2 = """\
Analyze the resume below and return a single JSON object with this schema:
{
  "meta": {
    "promptVersion": "{{PROMPT_VERSION}}",
    "model": "{{MODEL}}",
    "jobDescriptionProvided": {{JOB_DESCRIPTION_PROVIDED}},
    "confidence": 0.0,
    "assumptions": ["string"],
    "limitations": ["string"]
  },
  "summary": {
    "overallAssessment": "string",
    "strengths": ["string"],
    "weaknesses": ["string"]
  },
  "ats": {
    "score": 0,
    "scoreBreakdown": {"skills": 0, "experience": 0, "impact": 0, "formatting": 0, "roleFit": 0},
    "missingKeywords": {"fromJobDescription": ["string"], "industryCommon": ["string"]},
    "formattingIssues": ["string"]
  },
  "issues": [
    {
      "severity": "critical|high|medium|low",
      "section": "string",
      "problem": "string",
      "whyItMatters": "string",
      "suggestion": "string",
      "evidence": "short quote from the resume",
      "fixEffort": "low|medium|high"
    }
  ],
  "bulletRewrites": [
    {"section": "string", "before": "string", "after": "string", "rationale": "string"}
  ],
  "missingInformation": ["string"],
  "actionPlan": {"quickWins": ["string"], "mediumEffort": ["string"], "deepFixes": ["string"]}
}

Rules:
- Every key must be present. Use empty arrays instead of omitting keys.
- ats.score and every scoreBreakdown value are between 0 and 100.
- scoreBreakdown values should sum to 100.
- confidence is between 0 and 1."""

PROMPT_V2_1 = """\
Analyze the resume below and return a single JSON object with this schema:
{
  "meta": {
    "promptVersion": "{{PROMPT_VERSION}}",
    "model": "{{MODEL}}",
    "jobDescriptionProvided": {{JOB_DESCRIPTION_PROVIDED}},
    "confidence": 0.0,
    "assumptions": ["string"],
    "limitations": ["string"]
  },
  "summary": {"overallAssessment": "string", "strengths": ["string"], "weaknesses": ["string"]},
  "ats": {
    "score": 0,
    "scoreBreakdown": {"skills": 0, "experience": 0, "impact": 0, "formatting": 0, "roleFit": 0},
    "missingKeywords": {"fromJobDescription": ["string"], "industryCommon": ["string"]},
    "formattingIssues": ["string"]
  },
  "issues": [
    {
      "severity": "critical|high|medium|low",
      "priority": 1,
      "section": "string",
      "problem": "string",
      "whyItMatters": "string",
      "suggestion": "string",
      "evidence": "string",
      "fixEffort": "low|medium|high"
    }
  ],
  "bulletRewrites": [
    {
      "section": "string",
      "before": "string",
      "after": "string",
      "rationale": "string",
      "metricsSource": "resume|placeholder",
      "placeholdersNeeded": ["string"]
    }
  ],
  "missingInformation": ["string"],
  "actionPlan": {"quickWins": ["string"], "mediumEffort": ["string"], "deepFixes": ["string"]}
}

Rules:
- Every key must be present.
- ats.score is an integer from 0 to 100.
- scoreBreakdown values are integers that sum to exactly 100.
- When jobDescriptionProvided is false, missingKeywords.fromJobDescription must be [].
- issues[].priority is an integer from 1 (most urgent) to 10.
- issues[].evidence is at most 160 characters, or "notFound" when nothing in the resume supports it.
- bulletRewrites[].metricsSource is "resume" when every number in "after" appears in the resume.
  Otherwise use "placeholder", write the number as "X% (replace with exact figure)" and list
  the missing values in placeholdersNeeded."""

PROMPT_V2_2 = PROMPT_V2_1 + """
- ats must also contain "scoreReasoning": 3 to 6 short strings explaining the score.
- Each issue must also contain "autoFixable" (boolean) and "requiresUserInput" (array).
- An autoFixable issue must have an empty requiresUserInput.
- requiresUserInput may only contain: email, phone, linkedin, crm_tools, metrics, team_size,
  award_dates, target_role.
- Never describe impact as "double-digit", "significant", "substantial", "massive" or
  "remarkable" unless the resume says so verbatim."""

PROMPT_V2_3 = PROMPT_V2_2 + """
- ats must also contain "scoreExplanation": {"components": [...]} with exactly four
  components, keyed atsReadability ("ATS Readability"), skillMatch ("Skill Match"),
  experienceRelevance ("Experience Relevance") and resumeStructure ("Resume Structure").
  Each component has key, label, integer score (0-100), integer weight (0-100),
  explanation, helped (at least one item) and dragged (at least one item).
  Weights must sum to 100.
- Each bulletRewrite must also contain "claimSupport" (supported|inferred|placeholder)
  and "evidence" (quote from the resume, at most 160 characters, or "notFound").
- claimSupport "supported" requires evidence other than "notFound".
- metricsSource "resume" cannot be combined with claimSupport "placeholder"."""

RESUME_GEN_V1 = """\
You rewrite resumes into a structured JSON document. Respond with a single JSON object only.

Schema:
{
  "header": {"name": "", "title": "", "email": "", "phone": "", "location": "", "links": []},
  "summary": ["at most 4 lines"],
  "skills": {"languages": [], "frameworks": [], "databases": [], "cloudDevOps": [], "observability": [], "tools": []},
  "experience": [
    {"id": "", "company": "", "role": "", "location": "", "start": "YYYY-MM", "end": "YYYY-MM|Present", "highlights": ["at most 5"]}
  ],
  "projects": [{"name": "", "description": "", "start": "", "end": "", "highlights": []}],
  "education": [{"institution": "", "degree": "", "field": "", "location": "", "start": "", "end": "", "highlights": []}],
  "achievements": [{"title": "", "date": "", "highlights": []}],
  "certifications": [{"name": "", "issuer": "", "date": "", "expires": ""}]
}

Rules:
- Use only facts from the resume text. Apply the suggestions from the analysis where the resume supports them.
- Links must be full URLs. Use "TO-FILL: <what>" for values the candidate must supply.
- Do not include nationality, marital status or other personal attributes.

Resume text:
{{RESUME_TEXT}}

Analysis JSON:
{{ANALYSIS_JSON}}"""
