"""Course catalog, evaluations, forum, recommendations and advisor instructions."""
import pytest

from conftest import AUTH, OTHER_AUTH, USER_ID
from sukejuru.db.courses.crud import get_course_statistics, list_courses
from sukejuru.db.forum.crud import list_forum_messages


def _evaluation(**overrides):
    evaluation = {
        "content_clarity": 4,
        "content_interest": 5,
        "materials_helpful": 3,
        "hours_per_week": "3-5h",
        "instructor_clarity": 4,
        "teaching_engaging": "Yes",
        "grading_transparent": "Somewhat",
        "received_feedback": True,
        "feedback_helpful": 4,
        "overall_satisfaction": 4,
        "would_recommend": True,
        "liked_most": "Clear worked examples",
        "would_improve": "More practice problems",
        "advice_future_students": "Do the exercises every week",
    }
    evaluation.update(overrides)
    return evaluation


@pytest.fixture
def catalog(client):
    response = client.post("/api/courses/import", headers=AUTH)
    assert response.status_code == 200
    return response.json()["count"]


def test_import_upserts_catalog_by_short_name(client, catalog):
    assert catalog == 8
    assert client.post("/api/courses/import", headers=AUTH).json() == {"count": 8}

    courses = list_courses()
    assert len(courses) == 8
    mom = next(course for course in courses if course.id == "MoM")
    assert mom.course == "Mechanics of Materials"
    assert mom.lecture == {"day": "Tuesday", "start": "10:40", "end": "12:10", "instructor": "MATSUMOTO Ryosuke"}


def test_list_courses_ordered_with_empty_statistics(client, catalog):
    courses = client.get("/api/courses", headers=AUTH).json()["courses"]

    short_names = [course["short_name"] for course in courses]
    assert short_names == sorted(short_names)
    assert all(course["total_evaluations"] == 0 for course in courses)
    assert all(course["user_has_evaluated"] is False for course in courses)


def test_list_courses_search_and_level(client, catalog):
    found = client.get("/api/courses?search=signal", headers=AUTH).json()["courses"]
    assert [course["short_name"] for course in found] == ["DSP"]

    found = client.get("/api/courses?search=mom", headers=AUTH).json()["courses"]
    assert [course["short_name"] for course in found] == ["MoM"]

    assert client.get("/api/courses?level=Master", headers=AUTH).json() == {"courses": []}
    assert len(client.get("/api/courses?level=bachelor", headers=AUTH).json()["courses"]) == 8


def test_submit_evaluation(client, catalog):
    response = client.post("/api/courses/MoM/evaluations", headers=AUTH, json=_evaluation(
        received_feedback=False,
        feedback_helpful=5,
    ))

    assert response.status_code == 201
    evaluation = response.json()["evaluation"]
    assert evaluation["course_id"] == "MoM"
    assert evaluation["user_id"] == USER_ID
    assert evaluation["feedback_helpful"] is None
    assert evaluation["created_at"].endswith("Z")


def test_second_evaluation_conflicts(client, catalog):
    client.post("/api/courses/MoM/evaluations", headers=AUTH, json=_evaluation())

    response = client.post("/api/courses/MoM/evaluations", headers=AUTH, json=_evaluation(overall_satisfaction=1))

    assert response.status_code == 409
    assert response.json() == {"error": "You have already evaluated this course"}
    assert get_course_statistics()["MoM"]["total_evaluations"] == 1


def test_evaluation_of_unknown_course(client, catalog):
    response = client.post("/api/courses/XYZ/evaluations", headers=AUTH, json=_evaluation())

    assert response.status_code == 404
    assert response.json() == {"error": "Course not found"}


def test_evaluation_rating_out_of_range(client, catalog):
    response = client.post("/api/courses/MoM/evaluations", headers=AUTH, json=_evaluation(content_clarity=6))

    assert response.status_code == 400


def test_course_statistics(client, catalog):
    client.post("/api/courses/MoM/evaluations", headers=AUTH, json=_evaluation(overall_satisfaction=4))
    client.post("/api/courses/MoM/evaluations", headers=OTHER_AUTH, json=_evaluation(
        overall_satisfaction=5,
        teaching_engaging="No",
        received_feedback=False,
        hours_per_week="5-10h",
    ))

    courses = {c["short_name"]: c for c in client.get("/api/courses", headers=AUTH).json()["courses"]}
    mom = courses["MoM"]

    assert mom["total_evaluations"] == 2
    assert mom["avg_overall_satisfaction"] == 4.5
    assert mom["avg_content_interest"] == 5
    assert mom["avg_feedback_helpful"] == 4
    assert mom["teaching_engaging_yes_percent"] == 50.0
    assert mom["grading_transparent_yes_percent"] == 0
    assert mom["received_feedback_percent"] == 50.0
    assert mom["hours_distribution"] == {"<3h": 0, "3-5h": 50.0, "5-10h": 50.0, ">10h": 0}
    assert mom["user_has_evaluated"] is True
    assert courses["DSP"]["user_has_evaluated"] is False


def test_public_evaluations_hide_private_fields(client, catalog):
    client.post("/api/courses/MoM/evaluations", headers=AUTH, json=_evaluation())

    [evaluation] = client.get("/api/courses/MoM/evaluations", headers=OTHER_AUTH).json()["evaluations"]

    assert set(evaluation) == {"liked_most", "would_improve", "overall_satisfaction", "created_at"}
    assert evaluation["liked_most"] == "Clear worked examples"


def test_forum_sender_name_follows_profile(client, catalog):
    first = client.post("/api/courses/MoM/forum", headers=AUTH, json={"content": "  Anyone have notes?  "})
    assert first.status_code == 201
    assert first.json()["message"]["sender_name"] == "student@example.com"
    assert first.json()["message"]["content"] == "Anyone have notes?"

    client.put("/api/profile", headers=AUTH, json={"name": "Aiko"})
    second = client.post("/api/courses/MoM/forum", headers=AUTH, json={"content": "Found them, thanks"})
    assert second.json()["message"]["sender_name"] == "Aiko"

    messages = client.get("/api/courses/MoM/forum", headers=OTHER_AUTH).json()["messages"]
    assert [m["content"] for m in messages] == ["Anyone have notes?", "Found them, thanks"]
    assert len(list_forum_messages("MoM")) == 2


def test_forum_of_unknown_course(client, catalog):
    response = client.post("/api/courses/XYZ/forum", headers=AUTH, json={"content": "hello"})

    assert response.status_code == 404


def test_robotics_recommendation(client, catalog):
    response = client.post("/api/course-recommendations", json={"query": "I want to build robots"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["availableCourses"] == 8
    recommendation = body["recommendations"]
    assert recommendation["type"] == "field_recommendation"
    assert recommendation["careerPaths"]
    recommended = [course["short_name"] for course in recommendation["recommendedCourses"]]
    assert "MoM" in recommended
    assert "SLS" not in recommended
    assert len(recommended) <= 5


def test_chemistry_workload_recommendation(client, catalog):
    body = client.post("/api/course-recommendations", json={
        "query": "chemistry courses with a light workload",
        "workloadPreference": "low",
    }).json()

    recommendation = body["recommendations"]
    assert recommendation["type"] == "workload_analysis"
    assert [course["short_name"] for course in recommendation["recommendedCourses"]] == ["PChem"]
    assert recommendation["workloadTips"]


def test_general_recommendation_uses_evaluated_courses(client, catalog):
    client.post("/api/courses/DSP/evaluations", headers=AUTH, json=_evaluation(overall_satisfaction=3))
    client.post("/api/courses/MoM/evaluations", headers=AUTH, json=_evaluation(overall_satisfaction=5))

    body = client.post("/api/course-recommendations", json={"query": "what should I take?"}).json()

    recommendation = body["recommendations"]
    assert recommendation["type"] == "general_recommendation"
    assert [course["short_name"] for course in recommendation["recommendedCourses"]] == ["MoM", "DSP"]
    assert "careerPaths" not in recommendation


def test_field_filter(client, catalog):
    body = client.post("/api/course-recommendations", json={"query": "anything", "field": "Chemistry"}).json()

    assert body["totalCourses"] == 1


def test_ai_instructions_without_catalog(client):
    body = client.get("/api/ai-instructions").json()

    assert body["success"] is True
    assert body["hasCourseData"] is False
    assert body["courseDataSummary"] is None
    assert body["timestamp"].endswith("Z")


def test_ai_instructions_with_catalog(client, catalog):
    body = client.get("/api/ai-instructions").json()

    assert body["hasCourseData"] is True
    assert body["courseDataSummary"]["totalCourses"] == 8
    assert body["courseDataSummary"]["hasEvaluations"] is False
    assert "COURSE DATABASE SUMMARY (8 total courses)" in body["instructions"]
