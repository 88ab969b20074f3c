from __future__ import annotations

import pytest
from graphql import FragmentSpreadNode, OperationDefinitionNode, parse, print_ast

from graphsource.core.compiler import QueryCompiler, extract_fragment
from graphsource.core.errors import DocumentValidationError, UnresolvedFragmentError
from graphsource.core.fragments import parse_fragment
from graphsource.core.resolver import find_entity_types
from graphsource.core.synthesizer import QuerySynthesizer


def _inputs(remote_schema, languages=("EN",)):
    descriptors = find_entity_types(remote_schema, languages)
    synthesizer = QuerySynthesizer(remote_schema)
    listing = {d.remote_type_name: synthesizer.build_listing_queries(d) for d in descriptors}
    identity = {d.remote_type_name: synthesizer.identity_fragment(d) for d in descriptors}
    return descriptors, listing, identity


def _spreads(operation: OperationDefinitionNode) -> list[str]:
    entities = operation.selection_set.selections[0].selection_set.selections[0]
    return [s.name.value for s in entities.selection_set.selections if isinstance(s, FragmentSpreadNode)]


def test_data_spread_sits_next_to_identity_spread(compile_documents):
    documents = compile_documents()

    assert set(documents) == {"NodeArticle", "NodePage", "User"}
    article = documents["NodeArticle"]
    [operation] = [d for d in article.document.definitions if isinstance(d, OperationDefinitionNode)]
    assert _spreads(operation) == ["_NodeArticleId_", "NodeArticle"]
    assert article.query_field_name == "nodeQuery"


def test_one_operation_per_language(compile_documents):
    documents = compile_documents(("EN", "ES"))
    user = documents["User"]

    assert user.operations == {"EN": "LIST_User_EN", "ES": "LIST_User_ES"}
    assert user.operation_name("ES") == "LIST_User_ES"
    assert "entities(language: ES)" in user.text


def test_compiled_text_parses_back_to_same_document(compile_documents):
    document = compile_documents()["NodePage"]

    reparsed = parse(document.text)

    assert print_ast(reparsed) == document.text
    assert extract_fragment(reparsed, "_NodePageId_") is not None
    assert extract_fragment(reparsed, "NodePage") is not None
    assert extract_fragment(reparsed, "Missing") is None


def test_listing_queries_are_not_mutated(remote_schema):
    descriptors, listing, identity = _inputs(remote_schema)
    before = listing["User"][0].text
    fragments = {"User": parse_fragment("User", "fragment User on User { name }")}

    QueryCompiler(remote_schema).compile(descriptors[2:], listing, identity, fragments)

    assert listing["User"][0].text == before
    assert "...User" not in before


def test_custom_fragment_with_helper_fragments(remote_schema):
    descriptors, listing, identity = _inputs(remote_schema)
    article = [d for d in descriptors if d.remote_type_name == "NodeArticle"]
    fragment = parse_fragment(
        "NodeArticle",
        "fragment ArticleFields on NodeArticle { title body { ...Summary } }\n"
        "fragment Summary on TextSummary { value }",
        "custom",
    )

    documents = QueryCompiler(remote_schema).compile(article, listing, identity, {"NodeArticle": fragment})

    text = documents["NodeArticle"].text
    assert "...ArticleFields" in text
    assert "fragment Summary on TextSummary" in text


def test_missing_fragment_is_fatal(remote_schema):
    descriptors, listing, identity = _inputs(remote_schema)
    fragments = {"User": parse_fragment("User", "fragment User on User { name }")}

    with pytest.raises(UnresolvedFragmentError) as exc:
        QueryCompiler(remote_schema).compile(descriptors, listing, identity, fragments)

    assert exc.value.type_name in {"NodeArticle", "NodePage"}


def test_missing_listing_queries_are_fatal(remote_schema):
    descriptors, listing, identity = _inputs(remote_schema)
    fragments = {"User": parse_fragment("User", "fragment User on User { name }")}
    del listing["User"]

    with pytest.raises(UnresolvedFragmentError, match="listing queries"):
        QueryCompiler(remote_schema).compile(descriptors[2:], listing, identity, fragments)


def test_invalid_fragment_fails_validation(remote_schema):
    descriptors, listing, identity = _inputs(remote_schema)
    fragments = {"User": parse_fragment("User", "fragment User on User { nope }")}

    with pytest.raises(DocumentValidationError) as exc:
        QueryCompiler(remote_schema).compile(descriptors[2:], listing, identity, fragments)

    assert exc.value.type_name == "User"
    assert any("nope" in error for error in exc.value.errors)


def test_compiler_without_schema_skips_validation(remote_schema):
    descriptors, listing, identity = _inputs(remote_schema)
    fragments = {"User": parse_fragment("User", "fragment User on User { nope }")}

    documents = QueryCompiler().compile(descriptors[2:], listing, identity, fragments)

    assert "nope" in documents["User"].text


def test_merged_operations_keep_tuple_children(compile_documents):
    document = compile_documents(("EN", "ES"))["User"]
    operations = [d for d in document.document.definitions if isinstance(d, OperationDefinitionNode)]

    assert isinstance(document.document.definitions, tuple)
    for operation in operations:
        entities = operation.selection_set.selections[0].selection_set.selections[0]
        assert isinstance(entities.selection_set.selections, tuple)
        assert isinstance(operation.variable_definitions, tuple)
    assert document.text.count("...User\n") == 2
