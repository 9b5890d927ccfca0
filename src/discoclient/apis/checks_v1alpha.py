# Generated code. DO NOT EDIT!
# Regenerate with tools/codegen/generate.py from the discovery document.
"""Checks API v1alpha client."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from discoclient.config.settings import ClientOptions
from discoclient.credentials import Credentials
from discoclient.models import ApiRecord, Empty, Operation, Status
from discoclient.parameters import STANDARD_PARAMETERS, Parameter, ParameterKind
from discoclient.request import MethodSpec
from discoclient.resource import ResourceSpec
from discoclient.service import Service, ServiceSpec
from discoclient.transport import AsyncTransport, Transport


class AnalyzePrivacyPolicyRequest(ApiRecord):
    """The request proto for AnalyzePrivacyPolicy method."""

    privacy_policy_page_content: str | None = Field(default=None, description="Web page raw HTML content for the privacy policy page to be analyzed. Useful when the client wants to analyze a privacy policy already fetched.")
    privacy_policy_uri: str | None = Field(default=None, description="URL for the privacy policy page to be analyzed.")


class AnalyzePrivacyPolicyResponse(ApiRecord):
    """The response proto for AnalyzePrivacyPolicy method."""

    data_purpose_annotations: list[PolicyPurposeOfUseAnnotation] | None = Field(default=None, description="List of all data types in the privacy policy.")
    data_type_annotations: list[PolicyDataTypeAnnotation] | None = Field(default=None, description="List of all data types in the privacy policy.")
    html_content: str | None = Field(default=None, description="HTML content for the privacy policy page.")
    last_updated_date_info: LastUpdatedDate | None = Field(default=None, description="Information about the date when the privacy policy was last updated.")
    section_annotations: list[PolicySectionAnnotation] | None = Field(default=None, description="List of all sections in the privacy policy.")


class Date(ApiRecord):
    """Represents a whole or partial calendar date, such as a birthday. The time of day
    and time zone are either specified elsewhere or are insignificant.
    """

    day: int | None = Field(default=None, description="Day of a month. Must be from 1 to 31 and valid for the year and month, or 0 to specify a year by itself or a year and month where the day isn't significant.")
    month: int | None = Field(default=None, description="Month of a year. Must be from 1 to 12, or 0 to specify a year without a month and day.")
    year: int | None = Field(default=None, description="Year of the date. Must be from 1 to 9999, or 0 to specify a date without a year.")


class LastUpdatedDate(ApiRecord):
    """Information about the date when the privacy policy was last updated."""

    end_offset: int | None = Field(default=None, description="Byte offsets for the end of the date text inside the full text.")
    last_updated_date: Date | None = Field(default=None, description="Date when the privacy policy was last updated.")
    start_offset: int | None = Field(default=None, description="Byte offsets for the start of the date text inside the full text.")
    text_content: str | None = Field(default=None, description="The bytes of actual text content in the section. This field might contain HTML and it is not sanitized.")


class PolicyDataTypeAnnotation(ApiRecord):
    data_type: str | None = Field(default=None, description="Type of the data mentioned in the policy.")
    end_offset: int | None = Field(default=None, description="Byte offsets for the end of the data type sentence inside the full text.")
    score: float | None = Field(default=None, description="Score given by the model representing how confident it was regarding this `text_content` being of `data_type`.")
    start_offset: int | None = Field(default=None, description="Byte offsets for the start of the data type sentence inside the full text.")
    text_content: str | None = Field(default=None, description="Actual text content in the section. This field might contain HTML.")


class PolicyPurposeOfUseAnnotation(ApiRecord):
    end_offset: int | None = Field(default=None, description="Byte offsets for the end of the purpose of use sentence inside the full text.")
    purpose_of_use: str | None = Field(default=None, description="Purpose of use mentioned in the policy.")
    score: float | None = Field(default=None, description="Score given by the model representing how confident it was regarding this `text_content` being of `purpose_of_use`.")
    start_offset: int | None = Field(default=None, description="Byte offsets for the start of the purpose of use sentence inside the full text.")
    text_content: str | None = Field(default=None, description="The bytes of actual text content in the sentence that mentions the purpose of use.")


class PolicySectionAnnotation(ApiRecord):
    end_offset: int | None = Field(default=None, description="Byte offsets for the end of the section inside the full text.")
    score: float | None = Field(default=None, description="Score given by the model representing how confident it was regarding this `text_content` being of `section_type`.")
    section_type: str | None = Field(default=None, description="Type of the high-level category in the policy.")
    start_offset: int | None = Field(default=None, description="Byte offsets for the start of the section inside the full text.")
    text_content: str | None = Field(default=None, description="Actual text content in the section. This field might contain HTML.")


_MODELS: tuple[type[ApiRecord], ...] = (
    AnalyzePrivacyPolicyRequest,
    AnalyzePrivacyPolicyResponse,
    Date,
    LastUpdatedDate,
    PolicyDataTypeAnnotation,
    PolicyPurposeOfUseAnnotation,
    PolicySectionAnnotation,
)
for _model in _MODELS:
    _model.model_rebuild()


SERVICE = ServiceSpec(
    name="checks",
    version="v1alpha",
    root_url="https://checks.googleapis.com/",
    service_path="",
    batch_path="batch",
    title="Checks API",
    description="The Checks API contains powerful and easy-to-use privacy and compliance APIs that interact with the Checks product and its underlying technology.",
    scopes=frozenset({"https://www.googleapis.com/auth/xapi.zoo"}),
    discovery_version="v1",
    parameters=STANDARD_PARAMETERS,
    resources=(
        ResourceSpec(
            name="accounts",
            resources=(
                ResourceSpec(
                    name="apps",
                    resources=(
                        ResourceSpec(
                            name="operations",
                            methods=(
                                MethodSpec(
                                    id="checks.accounts.apps.operations.get",
                                    name="get",
                                    http_method="GET",
                                    path="v1alpha/{+name}",
                                    parameters=(
                                        Parameter("name", ParameterKind.PATH, required=True, pattern="^accounts/[^/]+/apps/[^/]+/operations/[^/]+$", description="The name of the operation resource."),
                                    ),
                                    response_model=Operation,
                                    description="Gets the latest state of a long-running operation. Clients can use this method to poll the operation result at intervals as recommended by the API service.",
                                    scopes=("https://www.googleapis.com/auth/xapi.zoo",),
                                ),
                            ),
                        ),
                    ),
                ),
            ),
        ),
        ResourceSpec(
            name="privacypolicy",
            methods=(
                MethodSpec(
                    id="checks.privacypolicy.analyze",
                    name="analyze",
                    http_method="POST",
                    path="v1alpha/privacypolicy:analyze",
                    request_model=AnalyzePrivacyPolicyRequest,
                    response_model=AnalyzePrivacyPolicyResponse,
                    description="Analyzes the privacy policy of the given policy URL or content.",
                    scopes=("https://www.googleapis.com/auth/xapi.zoo",),
                ),
            ),
        ),
    ),
    schemas={
        "AnalyzePrivacyPolicyRequest": AnalyzePrivacyPolicyRequest,
        "AnalyzePrivacyPolicyResponse": AnalyzePrivacyPolicyResponse,
        "Date": Date,
        "LastUpdatedDate": LastUpdatedDate,
        "Operation": Operation,
        "PolicyDataTypeAnnotation": PolicyDataTypeAnnotation,
        "PolicyPurposeOfUseAnnotation": PolicyPurposeOfUseAnnotation,
        "PolicySectionAnnotation": PolicySectionAnnotation,
        "Status": Status,
    },
)


def build(
    *,
    transport: Transport | None = None,
    async_transport: AsyncTransport | None = None,
    credentials: Credentials | None = None,
    options: ClientOptions | None = None,
) -> Service:
    return Service(
        SERVICE,
        transport=transport,
        async_transport=async_transport,
        credentials=credentials,
        options=options,
    )
