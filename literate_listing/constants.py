"""Constants used across the literate-listing package."""

from __future__ import annotations

from .models import Dialect, DialectMarkup, OutputFormat

DEFAULT_LINE_COMMENT = "//"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %Z"
DEFAULT_READ_BUFFER_SIZE = 4096
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_PANDOC = "pandoc"

# Native line-comment markers, keyed by lowercase language name
LANGUAGE_LINE_COMMENTS = {
    "c": "//",
    "erlang": "%%",
    "go": "//",
    "haskell": "--",
    "java": "//",
    "javascript": "//",
    "lisp": ";;;",
    "lua": "--",
    "python": "#",
    "ruby": "#",
    "rust": "//",
    "shell": "#",
}

OUTPUT_FORMAT_ALIASES = {
    "markdown": OutputFormat.MARKDOWN.value,
    "stdout": OutputFormat.STDOUT.value,
}

OUTPUT_FORMAT_DESCRIPTIONS = {
    OutputFormat.STDOUT: "write markdown to standard output",
    OutputFormat.MARKDOWN: "write markdown to file",
    OutputFormat.TEX: "produce a TeX listing",
    OutputFormat.HTML: "produce an HTML listing",
    OutputFormat.LATEX: "produce a LaTeX listing",
    OutputFormat.PDF: "produce a PDF listing",
}

OUTPUT_EXTENSIONS = {
    OutputFormat.MARKDOWN: ".md",
    OutputFormat.TEX: ".tex",
    OutputFormat.HTML: ".html",
    OutputFormat.LATEX: ".ltx",
    OutputFormat.PDF: ".pdf",
}

LATEX_STYLES = (Dialect.LATEX_LISTING.value, Dialect.LATEX_VERBATIM.value)

DIALECT_MARKUP = {
    # The two-space line forces renderers to start a fresh block before the
    # tab-indented code.
    Dialect.MARKDOWN: DialectMarkup(
        code_open="  \n",
        code_close="",
        prose_break="\n",
        code_prefix="\t",
        footer="",
    ),
    Dialect.LATEX_VERBATIM: DialectMarkup(
        code_open="\n\n\\begin{verbatim}\n",
        code_close="\\end{verbatim}\n\n",
        prose_break="",
        code_prefix="",
        footer="\\end{document}\n",
    ),
    Dialect.LATEX_LISTING: DialectMarkup(
        code_open="\n\n\\begin{lstlisting}[frame=single]\n",
        code_close="\\end{lstlisting}\n\n",
        prose_break="",
        code_prefix="",
        footer="\\end{document}\n",
    ),
}

LATEX_PREAMBLE = r"""\documentclass[11pt]{article}
\usepackage{parskip}
\setlength{\parindent}{0cm}
\usepackage[margin=0.75in]{geometry}
\usepackage{fancyvrb}
\usepackage{textcomp}
\usepackage{lmodern}
\usepackage[hidelinks]{hyperref}
\usepackage{graphicx}
\usepackage{amssymb}
\usepackage{listings}
\usepackage{framed}


\title{%(title)s}
\author{literate listing}
\date{%(date)s}

\begin{document}
\maketitle

"""

# Handed to pandoc with --template when producing PDFs
PANDOC_LATEX_TEMPLATE = r"""\documentclass[11pt]{article}
\usepackage{parskip}
\usepackage[margin=0.75in]{geometry}
\usepackage{lmodern}
\usepackage[T1]{fontenc}
\usepackage[utf8]{inputenc}
\usepackage{textcomp}
\usepackage[hidelinks]{hyperref}
\usepackage{listings}
\lstset{basicstyle=\ttfamily\small,breaklines=true,frame=single}
$if(highlighting-macros)$
$highlighting-macros$
$endif$
\providecommand{\tightlist}{%
  \setlength{\itemsep}{0pt}\setlength{\parskip}{0pt}}

$if(title)$
\title{$title$}
$endif$

\begin{document}
$if(title)$
\maketitle
$endif$

$body$

\end{document}
"""
