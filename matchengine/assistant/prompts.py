"""Prompt text and message assembly for chat and job analysis."""

from datetime import date

from matchengine.core.schemas import ConversationTurn, FreelancerCandidate, JobAnalysisRequest
from matchengine.matching.scorer import clamp
from matchengine.providers.base import Message

_CHAT_SYSTEM_PROMPT = (
    "You are FreelanceAI, an AI assistant for a freelance marketplace platform.\n\n"
    "YOUR SCOPE IS STRICTLY LIMITED TO FREELANCER MARKETPLACE TOPICS ONLY.\n\n"
    "Your core functions:\n"
    "1. Help users find freelancers based on project requirements and skills needed\n"
    "2. Explain how the platform works and its features\n"
    "3. Suggest optimal project structures and team compositions\n"
    "4. Provide technical guidance on project specifications\n\n"
    "For ANY off-topic question, politely decline and explain that you are a "
    "specialized assistant for freelancer marketplace topics only.\n\n"
    "Always be helpful, concise, and professional within your defined scope.\n\n"
    "Current date: {today}"
)

JOB_ANALYSIS_SYSTEM_PROMPT = (
    "You are an AI assistant for a freelance marketplace platform.\n"
    "Your task is to analyze a job request and rank the most suitable freelancers "
    "from the candidates provided, paying particular attention to technical skills.\n\n"
    "Rank the top 3 freelancers for the job.\n\n"
    "Return ONLY a JSON object (no markdown, no explanation) with this structure:\n"
    '{"analysis": "<your analysis of the job request>", '
    '"matches": [{"freelancerId": <id>, "score": <0-1>, "reasoning": "<why this freelancer fits>"}]}'
)

SUGGESTED_FOLLOW_UPS = (
    "What skills are most important for this job?",
    "Can you explain more about the job requirements?",
    "What is the typical timeframe for this kind of project?",
)

_FORMATTING_REQUIREMENTS = (
    "FORMATTING REQUIREMENTS:\n"
    '- When mentioning freelancers, ALWAYS use the format "[FREELANCER_ID:X] Freelancer Name" '
    "where X is their ID number\n"
    "- The [FREELANCER_ID:X] tag is REQUIRED for EVERY mentioned freelancer\n"
    "- Include 2-3 relevant freelancers with their skills, experience and rates"
)


def chat_system_prompt(today: date | None = None) -> str:
    return _CHAT_SYSTEM_PROMPT.format(today=(today or date.today()).isoformat())


def _describe(candidate: FreelancerCandidate, name: str) -> str:
    skills = ", ".join(sorted(candidate.skills, key=str.lower)) or "Not specified"
    lines = [
        f"[FREELANCER_ID:{candidate.id}] {name} - "
        f"{candidate.profession or 'Freelancer'} in {candidate.location or 'unspecified location'}",
        f"Skills: {skills}",
        f"Experience: {candidate.years_of_experience} years | "
        f"Performance: {clamp(candidate.job_performance):g}/100 | "
        f"Rate: ${candidate.hourly_rate:g}/hr",
    ]
    if candidate.bio:
        lines.append(candidate.bio)
    return "\n".join(lines)


def render_candidate_block(
    candidates: list[FreelancerCandidate],
    names: dict[int, str],
    limit: int = 5,
) -> str:
    """Describe up to ``limit`` candidates for the model, with the mention format."""
    if not candidates:
        return ""
    entries = [
        _describe(c, names.get(c.id, f"Freelancer {c.id}")) for c in candidates[:limit]
    ]
    return (
        "Here are freelancers from our platform who might be relevant to this request:\n\n"
        + "\n\n".join(entries)
        + "\n\n"
        + _FORMATTING_REQUIREMENTS
    )


def build_chat_messages(
    history: list[ConversationTurn],
    message: str,
    candidate_block: str = "",
) -> list[Message]:
    """Prior turns in order, then the new message with any candidate data appended."""
    messages: list[Message] = [{"role": t.role, "content": t.text} for t in history]
    content = f"{message}\n\n{candidate_block}" if candidate_block else message
    messages.append({"role": "user", "content": content})
    return messages


def build_job_analysis_message(
    request: JobAnalysisRequest,
    candidates: list[FreelancerCandidate],
    names: dict[int, str],
) -> list[Message]:
    parts = [f'Job Request Description: "{request.description}"']
    if request.skills:
        parts.append(f"Required Skills: {', '.join(request.skills)}")
    if request.budget is not None:
        parts.append(f"Budget: ${request.budget:g}")
    if request.timeline:
        parts.append(f"Timeline: {request.timeline}")

    if candidates:
        entries = [_describe(c, names.get(c.id, f"Freelancer {c.id}")) for c in candidates]
        parts.append("Available freelancers:\n\n" + "\n\n".join(entries))
    else:
        parts.append("Available freelancers: none")
    return [{"role": "user", "content": "\n\n".join(parts)}]
