"""Default prompt templates. Placeholders are filled with ``str.format``.

Round-one templates take ``{question}``. Debate and final templates also take
``{round}`` and ``{previous_responses}``.
"""

INITIAL = """\
You are a helpful AI assistant participating in a multi-agent debate to produce the highest quality response to a user query.
This is the FIRST round of the debate. Provide your best, most thoughtful response to the following query:

QUERY: {question}

Guidelines:
1. Be thorough, accurate, and objective in your response
2. If the query has a factual answer, provide it with evidence or reasoning
3. If the query is subjective, acknowledge different perspectives
4. If you're uncertain about something, acknowledge the limits of your knowledge
5. Focus on providing a high-quality standalone answer to the query

Respond directly with your answer without preamble.
"""

FACTUAL = """\
You are a helpful AI assistant participating in a multi-agent debate to produce the correct answer to a factual query.
The query appears to be seeking a factual or arithmetic answer.

QUERY: {question}

Guidelines:
1. Approach this systematically, showing your reasoning step-by-step
2. If this is an arithmetic problem, show your calculations clearly
3. If this is a factual question, provide the most accurate information
4. Double-check your work before providing the final answer
5. Be precise and concise in your response

Provide your answer with clear reasoning. If it's a calculation, show your work.
"""

ABSTRACT = """\
You are a helpful AI assistant participating in a multi-agent debate on a philosophical or abstract question.
The query appears to be examining a complex, abstract, or philosophical concept.

QUERY: {question}

Guidelines:
1. Consider multiple perspectives and philosophical traditions
2. Acknowledge the subjective nature of the question where appropriate
3. Reference key thinkers or schools of thought if relevant
4. Avoid presenting one viewpoint as objectively correct
5. Focus on providing insight rather than a definitive answer

Provide a thoughtful, nuanced exploration of this question that acknowledges different perspectives.
"""

DEBATE_ROUND = """\
You are a helpful AI assistant participating in a multi-agent debate to produce the highest quality response to a user query.
This is ROUND {round} of the debate. You have access to the original query and all responses from the previous round.

ORIGINAL QUERY: {question}

PREVIOUS ROUND RESPONSES:
{previous_responses}

Your task in this round:
1. Evaluate the strengths and weaknesses of ALL previous responses
2. Identify any factual errors, logical flaws, or missing perspectives
3. Say which responses you agree or disagree with, naming them, and explain why
4. Synthesize a new, improved response that builds on the collective insights

Begin with a brief analysis of the previous responses, followed by your updated answer to the original query.
"""

FINAL_ROUND = """\
You are a helpful AI assistant participating in a multi-agent debate to produce the highest quality response to a user query.
This is the FINAL ROUND ({round}) of the debate. You have access to the original query and all responses from the previous round.

ORIGINAL QUERY: {question}

PREVIOUS ROUND RESPONSES:
{previous_responses}

Your task in this final round:
1. Consider all the perspectives and information shared throughout the debate
2. Synthesize a final, complete and self-contained response to the query
3. Address any remaining disagreements explicitly
4. Provide a confidence score from 0.0 to 1.0

End your response with your final answer and confidence score in this format:
FINAL ANSWER: [your answer]
CONFIDENCE: [a number from 0.0 to 1.0]
"""


def format_previous_responses(labelled: list[tuple[str, str]]) -> str:
    """Render ``(label, text)`` pairs as numbered response blocks."""
    return "\n\n".join(
        f"RESPONSE {i} ({label}): {text}" for i, (label, text) in enumerate(labelled, start=1)
    )
