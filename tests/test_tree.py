from html_inliner.tree import iter_nodes, parse_fragment


def _elements(root):
    return [node for node in iter_nodes(root) if node.name]


def test_img_span_matches_source_text():
    html = '<div>\n  <p>Hi</p>\n  <img src="logo.svg" alt="x">\n</div>'
    img = next(node for node in _elements(parse_fragment(html)) if node.name == "img")
    assert html[img.start_offset:img.end_offset] == '<img src="logo.svg" alt="x">'
    assert img.attrs == {"src": "logo.svg", "alt": "x"}


def test_self_closing_and_quoted_gt():
    html = '<span><img alt="a > b" src=\'x.png\'/></span>'
    img = next(node for node in _elements(parse_fragment(html)) if node.name == "img")
    assert html[img.start_offset:img.end_offset] == "<img alt=\"a > b\" src='x.png'/>"


def test_fragment_has_no_implied_document_elements():
    root = parse_fragment("<img src='a.svg'>")
    assert root.name is None
    assert root.start_offset == 0
    assert [child.name for child in root.children] == ["img"]


def test_walk_is_preorder_document_order():
    html = "<div><p><b>1</b></p><i>2</i></div><em>3</em>"
    names = [node.name for node in _elements(parse_fragment(html))]
    assert names == ["div", "p", "b", "i", "em"]


def test_text_nodes_have_no_span_and_comments_are_dropped():
    root = parse_fragment("<p>hello<!-- note --></p>")
    paragraph = root.children[0]
    assert [child.text for child in paragraph.children] == ["hello"]
    assert paragraph.children[0].start_offset is None


def test_class_attribute_is_a_plain_string():
    root = parse_fragment('<img class="a b" src="x.svg">')
    assert root.children[0].attrs["class"] == "a b"


def test_deep_nesting_parses_without_recursion():
    html = "<div>" * 3000 + '<img src="logo.svg">' + "</div>" * 3000
    elements = [node for node in iter_nodes(parse_fragment(html)) if node.name]
    assert len(elements) == 3001
    img = elements[-1]
    assert html[img.start_offset:img.end_offset] == '<img src="logo.svg">'
