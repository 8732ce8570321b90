from api_doc_reader.annotations.markers import GET, Response, api, api_model, api_operation, path
from api_doc_reader.model.document import Document, Parameter, Tag
from api_doc_reader.reader.reader import Reader


@api(tags="atag")
@path("/apath")
class AnApi:
    @api_operation("Get a model.")
    @GET
    def get_operation(self) -> Response:
        return Response()


@api(hidden=True, tags="atag")
@path("/hidden/path")
class HiddenApi:
    @api_operation("Get a model.")
    @GET
    def get_operation(self) -> Response:
        return Response()


@api(tags="atag")
@path("/hidden/path")
class VisibleTwinApi:
    @api_operation("Get a model.")
    @GET
    def get_operation(self) -> Response:
        return Response()


@path("/apath")
class NotAnnotatedApi:
    pass


@api_model()
class ResponseDto:
    pass


class ResponseDtoList(list[ResponseDto]):
    pass


@api()
@path("/response")
class ApiWithSingleResponse:
    @api_operation("Get a response")
    def get_response(self) -> ResponseDto:
        return ResponseDto()


@api()
@path("/responselist")
class ApiWithResponseList:
    @api_operation("Get a list of responses", response=ResponseDtoList)
    def get_responses(self) -> list[ResponseDto]:
        return []


@api(tags="dto")
@path("/dto")
class ApiWithSingleResponseGet:
    @api_operation("Get a response")
    @GET
    def get_response(self) -> ResponseDto:
        return ResponseDto()


def _assert_empty(result: Document):
    assert result is not None
    assert result.tags is None
    assert result.paths is None


def _assert_contents(expected_tag: Tag, result: Document):
    assert result is not None
    assert result.tags
    assert expected_tag in result.tags
    assert result.paths
    assert "/apath" in result.paths
    assert result.paths["/apath"].operations
    assert result.paths["/apath"].get is not None


class TestExclusion:
    def test_ignore_class_without_api_marker(self):
        result = Reader(Document()).read(NotAnnotatedApi)
        _assert_empty(result)

    def test_ignore_hidden_api(self):
        result = Reader(Document()).read(HiddenApi)
        _assert_empty(result)

    def test_include_hidden_api_when_requested(self):
        result = Reader(Document()).read(
            HiddenApi,
            include_hidden=True,
            default_consumes=[],
            default_produces=[],
            seed_tags={},
            seed_parameters=[],
        )
        assert result.tags
        assert result.paths
        assert result.paths["/hidden/path"].get is not None

    def test_included_hidden_api_matches_visible_api(self):
        hidden = Reader().read(HiddenApi, include_hidden=True)
        visible = Reader().read(VisibleTwinApi)
        assert hidden.to_dict() == visible.to_dict()

    def test_empty_candidates(self):
        _assert_empty(Reader().read([]))


class TestDiscovery:
    def test_discover_api_operation(self):
        result = Reader(Document()).read(AnApi)
        _assert_contents(Tag(name="atag"), result)

    def test_create_document_if_none_provided(self):
        reader = Reader(None)
        result = reader.read(AnApi)
        _assert_contents(Tag(name="atag"), result)
        assert reader.document is result

    def test_returns_supplied_document(self):
        document = Document()
        assert Reader(document).read(AnApi) is document

    def test_accepts_several_candidates(self):
        result = Reader().read([NotAnnotatedApi, AnApi, ApiWithSingleResponseGet])
        assert set(result.paths) == {"/apath", "/dto"}
        assert [t.name for t in result.tags] == ["atag", "dto"]

    def test_repeated_reads_accumulate(self):
        reader = Reader()
        reader.read(AnApi)
        result = reader.read(ApiWithSingleResponseGet)
        assert set(result.paths) == {"/apath", "/dto"}
        assert "ResponseDto" in result.definitions

    def test_reading_twice_is_idempotent(self):
        once = Reader().read([AnApi, ApiWithSingleResponseGet])

        reader = Reader()
        reader.read([AnApi, ApiWithSingleResponseGet])
        twice = reader.read([AnApi, ApiWithSingleResponseGet])

        assert twice.to_dict() == once.to_dict()
        assert len(twice.tags) == 2
        assert list(twice.definitions) == ["ResponseDto"]


class TestResponseModels:
    def test_discover_response_dto_by_single_return_value(self):
        result = Reader(Document()).read(ApiWithSingleResponse)
        assert result.definitions.get("ResponseDto") is not None

    def test_discover_response_dto_as_element_of_list(self):
        result = Reader(Document()).read(ApiWithResponseList)
        assert result.definitions.get("ResponseDto") is not None
        assert "ResponseDtoList" not in result.definitions

    def test_operation_without_http_method_adds_no_path(self):
        result = Reader().read(ApiWithSingleResponse)
        assert result.paths is None
        assert result.tag("ApiWithSingleResponse") is not None

    def test_response_references_definition(self):
        result = Reader().read(ApiWithSingleResponseGet)
        response = result.paths["/dto"].get.responses["200"]
        assert response.description == "successful operation"
        assert response.schema_.ref == "#/definitions/ResponseDto"


class TestSeeds:
    def test_seed_tags_attached_to_every_operation(self):
        seed = {"common": Tag(name="common", description="Shared operations")}
        result = Reader().read([AnApi, ApiWithSingleResponseGet], seed_tags=seed)

        assert result.tag("common").description == "Shared operations"
        assert result.paths["/apath"].get.tags == ["common", "atag"]
        assert result.paths["/dto"].get.tags == ["common", "dto"]

    def test_seed_parameters_attached_to_every_operation(self):
        header = Parameter(name="X-Request-Id", in_="header", type="string")
        result = Reader().read([AnApi, ApiWithSingleResponseGet], seed_parameters=[header])

        for url in ("/apath", "/dto"):
            params = result.paths[url].get.parameters
            assert [(p.name, p.in_) for p in params] == [("X-Request-Id", "header")]

    def test_default_media_types(self):
        result = Reader().read(AnApi, default_consumes=["application/json"], default_produces=["application/xml"])
        operation = result.paths["/apath"].get
        assert operation.consumes == ["application/json"]
        assert operation.produces == ["application/xml"]
