"""DOCX renderer for the structured resume model (resume_modern_ats_v1)."""

from __future__ import annotations

import io
from pathlib import Path

from docx import Document
from docx.shared import Pt, RGBColor

from resume_insight.models.resume import ResumeModel

NAME_COLOR = RGBColor(0x11, 0x11, 0x11)
HEADING_COLOR = RGBColor(0x1F, 0x29, 0x37)
NAME_SIZE = Pt(16)
HEADING_SIZE = Pt(12)

SKILL_LABELS = {
    "languages": "Languages",
    "frameworks": "Frameworks",
    "databases": "Databases",
    "cloudDevOps": "Cloud & DevOps",
    "observability": "Observability",
    "tools": "Tools",
}


def render_resume(resume: ResumeModel) -> bytes:
    """Render the resume as a single-column ATS-friendly .docx."""
    doc = Document()

    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(10)

    _render_header(doc, resume)

    if resume.summary:
        _add_section_heading(doc, "Summary")
        for line in resume.summary:
            doc.add_paragraph(line)

    skills = [(k, v) for k, v in resume.skills.items() if v]
    if skills:
        _add_section_heading(doc, "Skills")
        for key, items in skills:
            p = doc.add_paragraph()
            p.add_run(f"{SKILL_LABELS.get(key, key)}: ").bold = True
            p.add_run(", ".join(items))

    if resume.experience:
        _add_section_heading(doc, "Experience")
        for exp in resume.experience:
            _add_entry_line(doc, f"{exp.role}, {exp.company}" if exp.role else exp.company,
                            _meta(exp.location, exp.start, exp.end))
            _add_bullets(doc, exp.highlights)

    if resume.projects:
        _add_section_heading(doc, "Projects")
        for project in resume.projects:
            _add_entry_line(doc, project.name, _meta("", project.start, project.end))
            if project.description:
                doc.add_paragraph(project.description)
            _add_bullets(doc, project.highlights)

    if resume.education:
        _add_section_heading(doc, "Education")
        for edu in resume.education:
            degree = ", ".join(part for part in (edu.degree, edu.field) if part)
            title = f"{degree}, {edu.institution}" if degree else edu.institution
            _add_entry_line(doc, title, _meta(edu.location, edu.start, edu.end))
            _add_bullets(doc, edu.highlights)

    if resume.certifications:
        _add_section_heading(doc, "Certifications")
        for cert in resume.certifications:
            title = f"{cert.name} ({cert.issuer})" if cert.issuer else cert.name
            dates = cert.date + (f" - expires {cert.expires}" if cert.expires else "")
            _add_entry_line(doc, title, dates)

    if resume.achievements:
        _add_section_heading(doc, "Awards")
        for achievement in resume.achievements:
            _add_entry_line(doc, achievement.title, achievement.date)
            _add_bullets(doc, achievement.highlights)

    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def save_resume_docx(resume: ResumeModel, output_path: str | Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(render_resume(resume))
    return output_path


def _render_header(doc, resume: ResumeModel) -> None:
    header = resume.header
    p = doc.add_paragraph()
    run = p.add_run(header.name)
    run.bold = True
    run.font.size = NAME_SIZE
    run.font.color.rgb = NAME_COLOR

    if header.title:
        doc.add_paragraph(header.title)

    contact = " | ".join(
        part for part in (header.email, header.phone, header.location, *header.links) if part
    )
    if contact:
        doc.add_paragraph(contact)


def _add_section_heading(doc, label: str) -> None:
    p = doc.add_paragraph()
    run = p.add_run(label)
    run.bold = True
    run.font.size = HEADING_SIZE
    run.font.color.rgb = HEADING_COLOR


def _add_entry_line(doc, title: str, meta: str) -> None:
    p = doc.add_paragraph()
    p.add_run(title).bold = True
    if meta:
        p.add_run(f"  {meta}").italic = True


def _add_bullets(doc, items: list[str]) -> None:
    for item in items:
        if item.strip():
            doc.add_paragraph(item.strip(), style="List Bullet")


def _meta(location: str, start: str, end: str) -> str:
    dates = " - ".join(part for part in (start, end) if part)
    return " | ".join(part for part in (location, dates) if part)
