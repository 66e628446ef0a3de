"""Jinja2 templates for exported documents.

Templates are rendered with autoescape off: every value is escaped by the
exporter for its target (HTML or XML rules) before it reaches a template.
"""

from typing import Any

from jinja2 import DictLoader, Environment

from ..config.constants import OPF_MEDIA_TYPE

HTML_STYLESHEET = """\
    :root {
      --bg: #fdf6ec;
      --fg: #3b2f1e;
      --accent: #8b5e3c;
      --muted: #c9b99a;
      --chapter-bg: #fefbf5;
    }

    * {
      margin: 0;
      padding: 0;
      box-sizing: border-box;
    }

    body {
      font-family: "Georgia", "Times New Roman", "Palatino Linotype", serif;
      background-color: var(--bg);
      color: var(--fg);
      line-height: 1.8;
      max-width: 42em;
      margin: 0 auto;
      padding: 2em 1.5em;
    }

    .title-page {
      text-align: center;
      padding: 4em 0 3em;
      border-bottom: 2px solid var(--muted);
      margin-bottom: 3em;
    }

    .title-page h1 {
      font-size: 2.4em;
      color: var(--accent);
      margin-bottom: 0.4em;
    }

    .title-page .author {
      font-size: 1.2em;
      font-style: italic;
      color: var(--accent);
    }

    .chapter {
      margin-bottom: 3em;
      padding-bottom: 2em;
      border-bottom: 1px solid var(--muted);
    }

    .chapter:last-child {
      border-bottom: none;
    }

    h2 {
      font-size: 1.6em;
      color: var(--accent);
      margin-bottom: 1em;
      padding-bottom: 0.3em;
      border-bottom: 1px solid var(--muted);
    }

    h3 { font-size: 1.3em; margin: 1.2em 0 0.6em; }
    h4 { font-size: 1.1em; margin: 1em 0 0.5em; }

    p {
      margin-bottom: 1em;
      text-align: justify;
      text-indent: 1.5em;
    }

    blockquote {
      margin: 1.5em 0;
      padding: 0.8em 1.5em;
      border-left: 4px solid var(--accent);
      background-color: var(--chapter-bg);
      font-style: italic;
    }

    blockquote p {
      text-indent: 0;
      margin-bottom: 0.5em;
    }

    ul, ol {
      margin: 1em 0 1em 2em;
    }

    li {
      margin-bottom: 0.3em;
    }

    hr {
      border: none;
      border-top: 1px solid var(--muted);
      margin: 2em 0;
    }

    code {
      font-family: "Courier New", monospace;
      background: var(--chapter-bg);
      padding: 0.1em 0.3em;
      border-radius: 3px;
    }

    @media print {
      body {
        background-color: #fff;
        color: #000;
        max-width: none;
        padding: 0;
      }

      .title-page {
        page-break-after: always;
      }

      .chapter {
        page-break-before: always;
        border-bottom: none;
      }
    }
"""

EPUB_STYLESHEET = """\
body {
  font-family: "Georgia", "Times New Roman", serif;
  line-height: 1.7;
  color: #2a2a2a;
  margin: 1em;
}
h1 {
  text-align: center;
  font-size: 2em;
  margin-bottom: 0.3em;
}
h2 {
  font-size: 1.5em;
  margin-top: 2em;
  margin-bottom: 1em;
}
p {
  margin-bottom: 0.8em;
  text-align: justify;
  text-indent: 1.5em;
}
.author {
  text-align: center;
  font-style: italic;
  color: #666;
  margin-bottom: 2em;
}
.title-page {
  text-align: center;
  padding-top: 30%;
}
blockquote {
  margin: 1em 2em;
  padding-left: 1em;
  border-left: 3px solid #999;
  font-style: italic;
}
blockquote p {
  text-indent: 0;
}
ul, ol {
  margin: 1em 0 1em 2em;
}
hr {
  border: none;
  border-top: 1px solid #ccc;
  margin: 2em 0;
}
code {
  font-family: "Courier New", monospace;
}
"""

CONTAINER_XML = f"""\
<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="{OPF_MEDIA_TYPE}" />
  </rootfiles>
</container>
"""

LATEX_PREAMBLE = """\
\\documentclass[12pt]{book}

\\usepackage[utf8]{inputenc}
\\usepackage[T1]{fontenc}
\\usepackage{geometry}
\\usepackage{setspace}
\\usepackage{parskip}

\\geometry{
  a4paper,
  margin=1in
}

\\onehalfspacing

"""

_TEMPLATES = {
    "book.html": """\
<!DOCTYPE html>
<html lang="{{ language }}">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{{ title }}</title>
  <style>
{{ stylesheet }}  </style>
</head>
<body>
    <header class="title-page">
      <h1>{{ title }}</h1>
{% if author %}
      <p class="author">{{ author }}</p>
{% endif %}
    </header>

{% for chapter in chapters %}
    <section class="chapter">
      <h2>{{ chapter.title }}</h2>
{% for line in chapter.lines %}
      {{ line }}
{% endfor %}
    </section>

{% endfor %}
</body>
</html>
""",

    "page.xhtml": """\
<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops" xml:lang="{{ language }}" lang="{{ language }}">
<head>
  <meta charset="UTF-8" />
  <title>{{ page_title }}</title>
  <link rel="stylesheet" type="text/css" href="style.css" />
</head>
<body>
{% block body %}
{% endblock %}
</body>
</html>
""",

    "title.xhtml": """\
{% extends "page.xhtml" %}
{% block body %}
  <div class="title-page">
    <h1>{{ title }}</h1>
{% if author %}
    <p class="author">by {{ author }}</p>
{% endif %}
  </div>
{% endblock %}
""",

    "chapter.xhtml": """\
{% extends "page.xhtml" %}
{% block body %}
  <h2>{{ page_title }}</h2>
{{ body }}{% endblock %}
""",

    "nav.xhtml": """\
{% extends "page.xhtml" %}
{% block body %}
  <nav epub:type="toc" id="toc">
    <h1>Table of Contents</h1>
    <ol>
      <li><a href="title.xhtml">Title Page</a></li>
{% for chapter in chapters %}
      <li><a href="{{ chapter.href }}">{{ chapter.title }}</a></li>
{% endfor %}
    </ol>
  </nav>
  <nav epub:type="landmarks" id="landmarks" hidden="hidden">
    <ol>
      <li><a epub:type="titlepage" href="title.xhtml">Title Page</a></li>
{% if chapters %}
      <li><a epub:type="bodymatter" href="{{ chapters[0].href }}">Start of Content</a></li>
{% endif %}
    </ol>
  </nav>
{% endblock %}
""",

    "toc.ncx": """\
<?xml version="1.0" encoding="UTF-8"?>
<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">
  <head>
    <meta name="dtb:uid" content="{{ uid }}" />
    <meta name="dtb:depth" content="1" />
    <meta name="dtb:totalPageCount" content="0" />
    <meta name="dtb:maxPageNumber" content="0" />
  </head>
  <docTitle>
    <text>{{ title }}</text>
  </docTitle>
  <navMap>
    <navPoint id="title" playOrder="1">
      <navLabel><text>Title Page</text></navLabel>
      <content src="title.xhtml" />
    </navPoint>
{% for chapter in chapters %}
    <navPoint id="{{ chapter.id }}" playOrder="{{ chapter.play_order }}">
      <navLabel><text>{{ chapter.title }}</text></navLabel>
      <content src="{{ chapter.href }}" />
    </navPoint>
{% endfor %}
  </navMap>
</ncx>
""",

    "content.opf": """\
<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="book-id">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:identifier id="book-id">urn:uuid:{{ uid }}</dc:identifier>
    <dc:title>{{ title }}</dc:title>
    <dc:creator>{{ author }}</dc:creator>
    <dc:language>{{ language }}</dc:language>
    <meta property="dcterms:modified">{{ modified }}</meta>
  </metadata>
  <manifest>
{% for item in manifest %}
    <item id="{{ item.id }}" href="{{ item.href }}" media-type="{{ item.media_type }}"{% if item.properties %} properties="{{ item.properties }}"{% endif %} />
{% endfor %}
  </manifest>
  <spine toc="ncx">
{% for idref in spine %}
    <itemref idref="{{ idref }}" />
{% endfor %}
  </spine>
</package>
""",
}

_env = Environment(
    loader=DictLoader(_TEMPLATES),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    autoescape=False
)


def render_template(name: str, **context: Any) -> str:
    """Render one of the document templates by name."""
    return _env.get_template(name).render(**context)
