"""
MJML Email Templates
Layout used for automation emails so rule bodies render consistently across clients
"""

from typing import Optional

THEME = {
    "primary": "#2563eb",
    "background": "#f8fafc",
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
    workspace_name: Optional[str] = None,
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

    sender_line = f"Sent by {workspace_name} via CareOps" if workspace_name else "Sent via CareOps"

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
        <mj-section background-color="#ffffff" padding="40px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="0 0 24px 0" />

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              {sender_line}
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def automation_notification_template(
    subject: str,
    body: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    workspace_name: Optional[str] = None,
) -> str:
    """Wrap an already-rendered automation body in the notification layout"""
    paragraphs = [p.strip() for p in body.split("\n\n") if p.strip()]
    content = "\n".join(
        f"<mj-text>{paragraph.replace(chr(10), '<br/>')}</mj-text>" for paragraph in paragraphs
    )

    return get_base_template(
        title=subject,
        preview_text=paragraphs[0][:120] if paragraphs else subject,
        content_sections=content,
        cta_url=cta_url,
        cta_label=cta_label,
        workspace_name=workspace_name,
    )
