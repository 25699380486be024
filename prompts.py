LEAD_SCHEMA = """  "leads": [
    {
      "name": "Full name of the individual",
      "title": "Job title or professional designation",
      "company": "Current organization or employer",
      "email": "Email address",
      "phone": "Contact number (mobile or office)"
    }
  ]"""

_RULES = (
    "- Extract ONLY the 5 required fields: name, title, company, email, phone\n"
    "- Include multiple contacts if found (CEO, manager, sales, etc.)\n"
    "- Only extract clearly visible contact information\n"
    "- Don't infer or guess missing data\n"
    "- Format phone numbers consistently\n"
    "- If no relevant information found, return empty leads array\n"
    "- Do NOT include website, address, or any other fields\n"
)


class LeadPrompts:
    """Prompts for turning website text into lead records."""

    EXTRACT_SYSTEM = (
        "You extract business contact details from noisy website text "
        "and return STRICT JSON."
    )

    @staticmethod
    def single_batch(keyword: str, url: str, content: str, max_chars: int = 50000) -> str:
        # Character cap is independent of word batching; protects against huge single tokens.
        body = (content or "")[:max_chars]
        return (
            "Extract business lead information from this website content.\n\n"
            f'KEYWORD: "{keyword}"\n'
            f'URL: "{url}"\n\n'
            "CONTENT:\n"
            f"{body}\n\n"
            "Extract ONLY the following 5 fields in JSON format:\n"
            "{\n" + LEAD_SCHEMA + "\n}\n\n"
            "Rules:\n" + _RULES + "\n"
            "Respond in valid JSON format only."
        )

    @staticmethod
    def batched(
        keyword: str,
        url: str,
        batch_content: str,
        context_summary: str = "",
        is_last: bool = False,
        index: int = 1,
        total: int = 1,
    ) -> str:
        context_section = f"\nPREVIOUS CONTEXT:\n{context_summary}\n" if context_summary else ""
        position = f"SECTION: {index} of {total}" + (" (final section)" if is_last else "")
        summary_rule = (
            "- Provide a context summary of everything found on this page so far\n"
            if is_last
            else "- Provide context summary for next batch\n"
        )
        return (
            "Extract business lead information from this website content.\n\n"
            f'KEYWORD: "{keyword}"\n'
            f'URL: "{url}"\n'
            f"{position}\n"
            f"{context_section}\n"
            "CURRENT CONTENT:\n"
            f"{batch_content}\n\n"
            "Extract ONLY the following 5 fields in JSON format:\n"
            "{\n" + LEAD_SCHEMA + ",\n"
            '  "context_summary": "Brief summary of key business information found"\n'
            "}\n\n"
            "Rules:\n" + _RULES + summary_rule + "\n"
            "Respond in valid JSON format only."
        )


class UrlFilterPrompts:
    """Prompts for picking the search results worth scraping for a keyword."""

    @staticmethod
    def relevance(keyword: str, results: list) -> str:
        listing = "\n".join(
            f'{i}. URL: {r.get("url", "")}\n   TITLE: {r.get("title", "")}\n   SNIPPET: {r.get("snippet", "")}'
            for i, r in enumerate(results)
        )
        return (
            "Select the search results that are likely to contain business contact "
            "information relevant to the keyword.\n\n"
            f'KEYWORD: "{keyword}"\n\n'
            "RESULTS:\n"
            f"{listing}\n\n"
            "Return JSON in this format:\n"
            '{ "relevant": [0, 2] }\n\n'
            "Rules:\n"
            "- List the index of every relevant result\n"
            "- Prefer official websites of businesses that match the keyword\n"
            "- Skip directories, news articles, job boards and social media\n"
            "- If nothing is relevant, return an empty list\n\n"
            "Respond in valid JSON format only."
        )
