from api_workbench.model.base import Collection, HttpMethod, Request, RequestDraft, Workspace


class TestRequest:
    def test_defaults(self):
        req = Request()
        assert req.name == ""
        assert req.method is HttpMethod.GET
        assert req.headers == {}
        assert req.body == ""

    def test_null_headers_read_as_empty(self):
        req = Request.model_validate({"name": "x", "method": "POST", "headers": None})
        assert req.headers == {}
        assert req.method is HttpMethod.POST

    def test_serializes_method_as_string(self):
        data = Request(name="r", method=HttpMethod.PUT).model_dump(mode="json")
        assert data["method"] == "PUT"
        assert set(data) == {"name", "method", "url", "headers", "body"}


class TestHierarchy:
    def test_null_lists_read_as_empty(self):
        ws = Workspace.model_validate({"name": "w", "collections": [{"name": "c", "requests": None}]})
        assert ws.collections[0].requests == []
        assert Workspace.model_validate({"collections": None}).collections == []

    def test_default_lists_are_not_shared(self):
        a, b = Collection(name="a"), Collection(name="b")
        a.requests.append(Request(name="r"))
        assert b.requests == []


class TestRequestDraft:
    def test_to_request_flattens_headers(self):
        draft = RequestDraft(
            method=HttpMethod.POST,
            url="https://api.example.com/users",
            headers_text="Accept: a\nAccept: b\nX-Id: 7",
            body='{"a": 1}',
        )
        req = draft.to_request("create")
        assert req.name == "create"
        assert req.headers == {"Accept": "a, b", "X-Id": "7"}
        assert req.body == '{"a": 1}'

    def test_unnamed_request_takes_url(self):
        req = RequestDraft(url="https://example.com").to_request()
        assert req.name == "https://example.com"

    def test_draft_keeps_repeated_headers_until_flattened(self):
        draft = RequestDraft(headers_text="A: 1\nA: 2")
        assert draft.headers == [("A", "1"), ("A", "2")]

    def test_from_request(self):
        req = Request(name="r", method=HttpMethod.PATCH, url="u", headers={"A": "1"}, body="b")
        draft = RequestDraft.from_request(req)
        assert draft.method is HttpMethod.PATCH
        assert draft.headers_text == "A: 1\n"
        assert draft.to_request("r") == req
