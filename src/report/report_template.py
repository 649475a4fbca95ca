"""Page template for HTML review reports."""

from string import Template


MERMAID_SCRIPT_URL = "https://cdn.jsdelivr.net/npm/mermaid@10/dist/mermaid.min.js"


# Placeholders: $html_lang, $branch_name, $mode, $timestamp, $version, $content, $mermaid_url.
# Literal dollar signs in the CSS or script must be written as $$.
REPORT_TEMPLATE = Template("""<!DOCTYPE html>
<html lang="$html_lang">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>PR Review - $branch_name</title>
  <style>
    :root {
      --bg-primary: #ffffff;
      --bg-secondary: #f6f8fa;
      --text-primary: #24292f;
      --text-secondary: #57606a;
      --border-color: #d0d7de;
      --accent-color: #0969da;
      --code-bg: #f6f8fa;
    }

    @media (prefers-color-scheme: dark) {
      :root {
        --bg-primary: #0d1117;
        --bg-secondary: #161b22;
        --text-primary: #e6edf3;
        --text-secondary: #8b949e;
        --border-color: #30363d;
        --accent-color: #58a6ff;
        --code-bg: #161b22;
      }
    }

    * { box-sizing: border-box; }

    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', 'Noto Sans', Helvetica, Arial, sans-serif;
      font-size: 16px;
      line-height: 1.6;
      color: var(--text-primary);
      background: var(--bg-primary);
      max-width: 980px;
      margin: 0 auto;
      padding: 2rem;
    }

    header {
      border-bottom: 1px solid var(--border-color);
      padding-bottom: 1rem;
      margin-bottom: 2rem;
    }

    header h1 { margin: 0 0 0.5rem 0; font-size: 2rem; font-weight: 600; }

    .meta {
      display: flex;
      flex-wrap: wrap;
      gap: 1rem;
      font-size: 0.875rem;
      color: var(--text-secondary);
    }

    .meta span {
      background: var(--bg-secondary);
      padding: 0.25rem 0.75rem;
      border-radius: 2rem;
      border: 1px solid var(--border-color);
    }

    main { min-height: 60vh; }

    h1, h2, h3, h4, h5, h6 { margin-top: 1.5em; margin-bottom: 0.5em; font-weight: 600; line-height: 1.25; }
    h1 { font-size: 2em; border-bottom: 1px solid var(--border-color); padding-bottom: 0.3em; }
    h2 { font-size: 1.5em; border-bottom: 1px solid var(--border-color); padding-bottom: 0.3em; }
    h3 { font-size: 1.25em; }
    h4 { font-size: 1em; }

    a { color: var(--accent-color); text-decoration: none; }
    a:hover { text-decoration: underline; }

    ul, ol { margin: 1em 0; padding-left: 2em; }
    li { margin: 0.25em 0; }
    li > ul, li > ol { margin: 0; }

    blockquote {
      margin: 1em 0;
      padding: 0.5em 1em;
      border-left: 4px solid var(--accent-color);
      background: var(--bg-secondary);
      color: var(--text-secondary);
    }

    code {
      font-family: ui-monospace, SFMono-Regular, 'SF Mono', Menlo, Consolas, 'Liberation Mono', monospace;
      font-size: 0.875em;
      background: var(--bg-secondary);
      padding: 0.2em 0.4em;
      border-radius: 6px;
    }

    pre {
      margin: 1em 0;
      padding: 1rem;
      background: var(--code-bg);
      border: 1px solid var(--border-color);
      border-radius: 6px;
      overflow-x: auto;
    }

    pre code { background: none; padding: 0; font-size: 0.875rem; line-height: 1.45; }

    table { width: 100%; margin: 1em 0; border-collapse: collapse; }
    th, td { padding: 0.75rem 1rem; border: 1px solid var(--border-color); text-align: left; }
    th { background: var(--bg-secondary); font-weight: 600; }

    hr { border: 0; height: 1px; background: var(--border-color); margin: 2em 0; }

    .mermaid {
      background: var(--bg-secondary);
      border: 1px solid var(--border-color);
      border-radius: 6px;
      padding: 1.5rem;
      margin: 1.5em 0;
      text-align: center;
      overflow-x: auto;
    }

    footer {
      margin-top: 3rem;
      padding-top: 1rem;
      border-top: 1px solid var(--border-color);
      text-align: center;
      font-size: 0.875rem;
      color: var(--text-secondary);
    }

    @media print {
      body { max-width: none; padding: 0; }
      .mermaid { page-break-inside: avoid; }
    }
  </style>
</head>
<body>
  <header>
    <h1>PR Review Report</h1>
    <div class="meta">
      <span>Branch: $branch_name</span>
      <span>Mode: $mode</span>
      <span>Generated: $timestamp</span>
    </div>
  </header>

  <main>
$content
  </main>

  <footer>
    <p>Generated by pr-reviewer v$version</p>
  </footer>

  <script src="$mermaid_url"></script>
  <script>
    mermaid.initialize({
      startOnLoad: true,
      theme: window.matchMedia('(prefers-color-scheme: dark)').matches ? 'dark' : 'default',
      securityLevel: 'strict'
    });
  </script>
</body>
</html>
""")
