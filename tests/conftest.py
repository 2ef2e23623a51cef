"""Shared fixtures: a small generated documentation site."""

from pathlib import Path

import pytest

NAVTREEDATA = """/*
 generated navigation data
*/
var NAVTREE =
[
  [ "demo", "index.html", [
    [ "Guide", "guide.html", [
      [ "Install", "guide.html#install", null ]
    ] ],
    [ "Topics", "topics.html", "topics" ],
    [ "Missing", "missing.html", "nowhere" ]
  ] ]
];

var NAVTREEINDEX =
[
"group__parser.html"
];

var SYNCONMSG = 'click to disable panel synchronisation';
var SYNCOFFMSG = 'click to enable panel synchronisation';
"""

TOPICS = """var topics =
[
    [ "Parser", "group__parser.html", null ]
];
"""

NAVTREEINDEX0 = """var NAVTREEINDEX0 =
{
"group__parser.html":[0,1,0],
"guide.html":[0,0],
"guide.html#install":[0,0,0],
"index.html":[0]
};
"""

SEARCH_ALL = """var searchData=
[
  ['guide_0',['Guide',['../guide.html',1,'']]],
  ['install_1',['Install',['../guide.html#install',1,'Guide'],['../install.html',0,'External']]],
  ['parser_2',['Parser',['../group__parser.html',1,'']]]
];
"""

SEARCH_GROUPS = """var searchData=
[
  ['parser_0',['Parser',['../group__parser.html',1,'']]]
];
"""

SEARCHDATA = """var indexSectionsWithContent =
{
  0: "gip",
  1: "p"
};

var indexSectionNames =
{
  0: "all",
  1: "groups"
};

var indexSectionLabels =
{
  0: "All",
  1: "Topics"
};
"""


@pytest.fixture
def sample_site(tmp_path: Path) -> Path:
    """Write a small documentation site.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        Path to the HTML directory.
    """
    html_dir = tmp_path / "html"
    search_dir = html_dir / "search"
    search_dir.mkdir(parents=True)
    (html_dir / "navtreedata.js").write_text(NAVTREEDATA)
    (html_dir / "topics.js").write_text(TOPICS)
    (html_dir / "navtreeindex0.js").write_text(NAVTREEINDEX0)
    (search_dir / "all_0.js").write_text(SEARCH_ALL)
    (search_dir / "groups_0.js").write_text(SEARCH_GROUPS)
    (search_dir / "searchdata.js").write_text(SEARCHDATA)
    (search_dir / "search.js").write_text("function init_search() { return 1; }\n")
    return html_dir
