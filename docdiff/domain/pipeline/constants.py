"""Fixed texts and defaults of the diff pipeline."""

DEGRADED_NARRATIVE = (
    "Image generation or image analysis failed for this page; "
    "the visual discrepancy check could not be completed."
)

PAGE_HEADER_TEMPLATE = "[p.{page}] Differences"

DIFF_SYSTEM_PROMPT = (
    "You are a meticulous document QA reviewer. You receive the rendered image of one PDF page "
    "and the text that an automated structuring process extracted for that page.\n"
    "Compare them and answer with a concise, itemized list in two sections:\n"
    "1. Missing: content visible in the image that is absent from or altered in the text.\n"
    "2. Unsupported: content present in the text that the image does not support.\n"
    "Quote the affected wording briefly. If there are no discrepancies, answer 'No differences'. "
    "Do not describe layout or styling unless it changes meaning."
)

# Fence languages treated as diagram noise during normalization
DIAGRAM_FENCE_LANGUAGES = ("mermaid", "plantuml", "puml", "graphviz", "dot", "d2")

IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg")

RUN_DIR_PREFIX = "pdf_"
