"""
Tests for customer feedback links and the office feedback list.
"""

from conftest import recipients_of


class TestFeedback:

    async def test_request_requires_completed_job(self, client, admin_headers, make_job, employee):
        job = make_job([employee])
        response = await client.post(f"/api/jobs/{job.id}/request-feedback", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Feedback can only be requested for completed jobs"

    async def test_request_emails_customer_a_link(
        self, client, db, admin_headers, make_job, employee, customer, sent_emails
    ):
        job = make_job([employee], status="completed")

        response = await client.post(f"/api/jobs/{job.id}/request-feedback", headers=admin_headers)

        assert response.status_code == 200
        db.refresh(job)
        assert job.feedback_token
        assert job.feedback_token in response.json()["feedbackUrl"]
        assert customer.email in recipients_of(sent_emails)

    async def test_public_page_and_submit(self, client, db, make_job, employee):
        job = make_job([employee], status="completed", feedback_token="tok-123")

        page = (await client.get("/api/public/feedback/tok-123")).json()
        assert page["alreadySubmitted"] is False
        assert page["jobTitle"] == "Weekly clean"
        assert page["companyName"] == "Sparkle Cleaning"

        response = await client.post("/api/public/feedback/tok-123", json={"rating": "5", "comment": "Spotless"})
        assert response.status_code == 200
        db.refresh(job)
        assert job.quality_rating == 5
        assert job.customer_feedback == "Spotless"

        page = (await client.get("/api/public/feedback/tok-123")).json()
        assert page["alreadySubmitted"] is True

    async def test_second_submission_rejected(self, client, make_job, employee):
        make_job([employee], status="completed", feedback_token="tok-456")
        await client.post("/api/public/feedback/tok-456", json={"rating": 4})

        response = await client.post("/api/public/feedback/tok-456", json={"rating": 2})
        assert response.status_code == 400
        assert response.json()["detail"] == "Feedback has already been submitted for this job"

    async def test_invalid_rating(self, client, make_job, employee):
        make_job([employee], status="completed", feedback_token="tok-789")
        response = await client.post("/api/public/feedback/tok-789", json={"rating": 9})
        assert response.status_code == 400

    async def test_unknown_token(self, client):
        response = await client.get("/api/public/feedback/nope")
        assert response.status_code == 404

    async def test_list_with_summary(self, client, admin_headers, make_job, employee):
        make_job([employee], status="completed", feedback_token="a")
        make_job([employee], status="completed", feedback_token="b")
        await client.post("/api/public/feedback/a", json={"rating": 5})
        await client.post("/api/public/feedback/b", json={"rating": 2})

        data = (await client.get("/api/feedback", headers=admin_headers)).json()

        assert len(data["feedback"]) == 2
        assert data["summary"]["totalFeedback"] == 2
        assert data["summary"]["averageRating"] == 3.5
        assert data["summary"]["ratingDistribution"]["excellent"] == 1
        assert data["summary"]["ratingDistribution"]["poor"] == 1

        data = (await client.get("/api/feedback?minRating=4", headers=admin_headers)).json()
        assert [f["rating"] for f in data["feedback"]] == [5]
