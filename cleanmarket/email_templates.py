"""
MJML Email Templates
Template for the preferred-cleaner notification
"""

from typing import Optional

from .config import FRONTEND_URL

# App theme colors - Teal/Slate color scheme
THEME = {
    "primary": "#14b8a6",
    "primary_dark": "#0d9488",
    "primary_light": "#ccfbf1",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="0 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="32px 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <!-- Footer -->
        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="12px" color="#94a3b8" padding="0">
              You're receiving this because you have a cleaner account with CleanMarket.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def preferred_cleaner_template(cleaner_first_name: str, homeowner_name: str, home_label: str) -> str:
    """Preferred cleaner status granted MJML template"""
    content = f"""
    <mj-text>
      Hi {cleaner_first_name},
    </mj-text>

    <mj-text>
      {homeowner_name} loved your work and has made you a preferred cleaner for {home_label}.
    </mj-text>

    <mj-text color="{THEME['text_muted']}" font-size="14px">
      Preferred cleaners can book future jobs at this home without waiting for the homeowner's approval.
    </mj-text>
    """

    return get_base_template(
        title="You earned preferred status!",
        preview_text=f"{homeowner_name} has made you a preferred cleaner",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/my-jobs",
        cta_label="View Available Jobs",
    )
