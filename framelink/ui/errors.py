"""Not-found and global error pages.

Rendered as plain HTML so they work for any route, including when the
NiceGUI client itself failed to build the page.
"""

from html import escape

ERROR_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{title} - FrameLink Support</title>
  <style>
    body {{ font-family: 'Inter', sans-serif; background: #f5f5f5; margin: 0; }}
    .wrap {{ min-height: 100vh; display: flex; align-items: center; justify-content: center; }}
    .card {{ background: white; border-radius: 12px; padding: 2.5rem 3rem; text-align: center;
             box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1); }}
    h1 {{ font-size: 2.5rem; margin: 0 0 0.5rem;
          background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
          -webkit-background-clip: text; color: transparent; }}
    p {{ color: #4b5563; margin: 0 0 1.5rem; }}
    a {{ display: inline-block; padding: 0.6rem 1.4rem; border-radius: 8px; color: white;
         text-decoration: none; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); }}
  </style>
</head>
<body>
  <div class="wrap">
    <div class="card">
      <h1>{title}</h1>
      <p>{message}</p>
      <a href="{action_href}">{action_label}</a>
    </div>
  </div>
</body>
</html>
"""


def render_error_page(title: str, message: str, action_label: str, action_href: str) -> str:
    return ERROR_PAGE_TEMPLATE.format(
        title=escape(title),
        message=escape(message),
        action_label=escape(action_label),
        action_href=escape(action_href, quote=True),
    )


def not_found_page() -> str:
    return render_error_page(
        title="404",
        message="Could not find the requested resource.",
        action_label="Return Home",
        action_href="/",
    )


def global_error_page(path: str = "/") -> str:
    # "Try again" reloads the page that failed
    return render_error_page(
        title="Something went wrong!",
        message="A global error occurred. Please try refreshing the page.",
        action_label="Try again",
        action_href=path,
    )
