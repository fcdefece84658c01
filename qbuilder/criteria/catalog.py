"""
Trigger-criteria catalog for questionnaire edges.

Defines:
- Every criterion kind an edge can carry, with its display label
- The question tag vocabulary
- Which kinds are legal on edges leaving a question, given its type and tags
"""

from typing import Dict, Iterable, List, Optional
from enum import Enum


class CriterionKind(str, Enum):
    """Criterion kinds. Values are the identifiers the backend stores."""
    # Age
    AGE_GTE = "age_gte"
    AGE_LT = "age_lt"

    # Gender
    GENDER_FEMALE = "gender_female"
    GENDER_NOT_FEMALE = "gender_not_female"

    # Boolean
    BOOL_YES = "bool_yes"
    BOOL_NO = "bool_no"

    # List
    LIST_VALUE_SET = "list_value_set"
    LIST_VALUE_NOT_SET = "list_value_not_set"
    ANY_LIST_VALUE_SET = "any_list_value_set"
    NO_LIST_VALUE_SET = "no_list_value_set"

    # BMI
    BMI_GTE = "bmi_gte"
    BMI_LT = "bmi_lt"

    # Ethnicity
    ETHNICITY_SET = "ethnicity_set"
    ETHNICITY_NOT_SET = "ethnicity_not_set"

    # Medication
    RECENT_MEDICATION_USAGE_INDICATED = "recent_medication_usage_indicated"
    RECENT_MEDICATION_USAGE_NOT_INDICATED = "recent_medication_usage_not_indicated"

    # Authentication
    AUTHENTICATED = "Authenticated"
    UNAUTHENTICATED = "Unauthenticated"

    # Cold chain
    COLD_CHAIN_SERVICEABLE_TRUE = "Cold Chain Serviceable True"
    COLD_CHAIN_SERVICEABLE_FALSE = "Cold Chain Serviceable False"

    # Time
    TIME_PASSED_GTE = "Time passed greater than or equal"
    TIME_PASSED_LT = "Time passed less than"


CRITERION_LABELS: Dict[CriterionKind, str] = {
    CriterionKind.AGE_GTE: "Age greater than or equal",
    CriterionKind.AGE_LT: "Age less than",
    CriterionKind.GENDER_FEMALE: "Gender is female",
    CriterionKind.GENDER_NOT_FEMALE: "Gender is not female",
    CriterionKind.BOOL_YES: "Boolean yes",
    CriterionKind.BOOL_NO: "Boolean no",
    CriterionKind.LIST_VALUE_SET: "List value set",
    CriterionKind.LIST_VALUE_NOT_SET: "List value not set",
    CriterionKind.ANY_LIST_VALUE_SET: "Any list value set",
    CriterionKind.NO_LIST_VALUE_SET: "No list value set",
    CriterionKind.BMI_GTE: "BMI greater than or equal",
    CriterionKind.BMI_LT: "BMI less than",
    CriterionKind.ETHNICITY_SET: "Ethnicity set",
    CriterionKind.ETHNICITY_NOT_SET: "Ethnicity not set",
    CriterionKind.RECENT_MEDICATION_USAGE_INDICATED: "Recent medication usage indicated",
    CriterionKind.RECENT_MEDICATION_USAGE_NOT_INDICATED: "Recent medication usage not indicated",
    CriterionKind.AUTHENTICATED: "Authenticated",
    CriterionKind.UNAUTHENTICATED: "Unauthenticated",
    CriterionKind.COLD_CHAIN_SERVICEABLE_TRUE: "Cold Chain Serviceable True",
    CriterionKind.COLD_CHAIN_SERVICEABLE_FALSE: "Cold Chain Serviceable False",
    CriterionKind.TIME_PASSED_GTE: "Time passed greater than or equal",
    CriterionKind.TIME_PASSED_LT: "Time passed less than",
}

_KINDS_BY_LABEL: Dict[str, CriterionKind] = {
    label: kind for kind, label in CRITERION_LABELS.items()
}

BOOLEAN_KINDS = (CriterionKind.BOOL_YES, CriterionKind.BOOL_NO)

# Offered when a question has neither tags nor type-driven kinds
BASELINE_CRITERIA: List[CriterionKind] = [
    CriterionKind.BOOL_YES,
    CriterionKind.BOOL_NO,
    CriterionKind.LIST_VALUE_SET,
    CriterionKind.LIST_VALUE_NOT_SET,
]


class QuestionTag(str, Enum):
    """Domain attributes a question can declare."""
    ADDRESS = "address"
    ALLERGIES = "allergies"
    CURRENTLY_ON_PILL = "currently_on_pill"
    DEMOGRAPHIC_DOB = "demographic_dob"
    DEMOGRAPHIC_FULL_NAME = "demographic_full_name"
    DEMOGRAPHIC_GENDER = "demographic_gender"
    DEMOGRAPHIC_OTHER = "demographic_other"
    DVA = "dva"
    EMAIL = "email"
    ESCRIPT_ONLY = "eScript_only"
    ETHNICITY = "ethnicity"
    FAMILY_HISTORY = "family_history"
    MEDICAL_HISTORY = "medical_history"
    MEDICARE = "medicare"
    MEDICATION = "medication"
    MOBILE = "mobile"
    NIB_MEMBERSHIP_NUMBER = "nib_membership_number"
    OBSERVATION_ALCOHOL = "observation_alcohol"
    OBSERVATION_BP = "observation_bp"
    OBSERVATION_HEIGHT = "observation_height"
    OBSERVATION_SMOKING = "observation_smoking"
    OBSERVATION_WAIST = "observation_waist"
    OBSERVATION_WEIGHT = "observation_weight"
    OTHER = "other"
    PAYMENT = "payment"
    PREFERRED_PRODUCT = "preferred_product"
    PREVIOUSLY_ON_PILL = "previously_on_pill"
    RECENTLY_ON_MEDICATION = "recently_on_medication"

    @property
    def display_name(self) -> str:
        return " ".join(word.capitalize() for word in self.name.split("_"))


_LIST_KINDS = [
    CriterionKind.LIST_VALUE_SET,
    CriterionKind.LIST_VALUE_NOT_SET,
    CriterionKind.ANY_LIST_VALUE_SET,
    CriterionKind.NO_LIST_VALUE_SET,
]

_AGE_KINDS = [CriterionKind.AGE_GTE, CriterionKind.AGE_LT]

# Kinds unlocked by the question type alone
TYPE_CRITERIA: Dict[str, List[CriterionKind]] = {
    "number": list(_AGE_KINDS),
    "float": list(_AGE_KINDS),
    "single_selection_list": list(_LIST_KINDS),
    "multi_selection_list": list(_LIST_KINDS),
}

# Kinds unlocked by each declared tag
TAG_CRITERIA: Dict[str, List[CriterionKind]] = {
    QuestionTag.DEMOGRAPHIC_GENDER.value: [
        CriterionKind.GENDER_FEMALE,
        CriterionKind.GENDER_NOT_FEMALE,
    ],
    QuestionTag.DEMOGRAPHIC_DOB.value: [
        CriterionKind.AGE_GTE,
        CriterionKind.AGE_LT,
        CriterionKind.TIME_PASSED_GTE,
        CriterionKind.TIME_PASSED_LT,
    ],
    QuestionTag.OBSERVATION_HEIGHT.value: [CriterionKind.BMI_GTE, CriterionKind.BMI_LT],
    QuestionTag.OBSERVATION_WEIGHT.value: [CriterionKind.BMI_GTE, CriterionKind.BMI_LT],
    QuestionTag.ETHNICITY.value: [
        CriterionKind.ETHNICITY_SET,
        CriterionKind.ETHNICITY_NOT_SET,
    ],
    QuestionTag.RECENTLY_ON_MEDICATION.value: [
        CriterionKind.RECENT_MEDICATION_USAGE_INDICATED,
        CriterionKind.RECENT_MEDICATION_USAGE_NOT_INDICATED,
    ],
    QuestionTag.ADDRESS.value: [
        CriterionKind.COLD_CHAIN_SERVICEABLE_TRUE,
        CriterionKind.COLD_CHAIN_SERVICEABLE_FALSE,
    ],
}


class UnknownCriterionLabel(KeyError):
    """Raised when a wire label does not name any known criterion kind."""


def _value(item) -> str:
    return item.value if isinstance(item, Enum) else str(item)


def criteria_for_question(
    question_type: Optional[str],
    tags: Optional[Iterable[str]] = None
) -> List[CriterionKind]:
    """
    Resolve the criterion kinds legal on edges leaving a question.

    Type kinds come first, then each tag's kinds in tag order, then the two
    boolean kinds. Duplicates keep their first position. A question with no
    tags and no type-driven kinds gets BASELINE_CRITERIA.

    Args:
        question_type: The question's type value
        tags: The question's declared tags

    Returns:
        Ordered list of legal kinds
    """
    tag_values = [_value(tag) for tag in (tags or [])]
    type_kinds = TYPE_CRITERIA.get(_value(question_type), []) if question_type else []

    if not tag_values and not type_kinds:
        return list(BASELINE_CRITERIA)

    available: List[CriterionKind] = list(type_kinds)
    for tag in tag_values:
        available.extend(TAG_CRITERIA.get(tag, []))
    available.extend(BOOLEAN_KINDS)

    # dict keeps insertion order
    return list(dict.fromkeys(available))


def label_for(kind) -> str:
    """Display label for a kind. Unknown kinds raise KeyError."""
    try:
        return CRITERION_LABELS[CriterionKind(_value(kind))]
    except ValueError:
        raise KeyError(kind) from None


def kind_for_label(label: str) -> CriterionKind:
    """Reverse lookup from a wire label ("Boolean yes") to its kind."""
    try:
        return _KINDS_BY_LABEL[label]
    except KeyError:
        raise UnknownCriterionLabel(label) from None


def format_for_dropdown(kinds: Iterable[CriterionKind]) -> List[Dict[str, str]]:
    """Pair each kind with its label for a selection widget."""
    return [{"value": kind.value, "label": label_for(kind)} for kind in kinds]
