"""GraphQL documents sent to the GitHub API."""

USER_CONTRIBUTIONS_QUERY = """
query($cursor: String, $login: String!, $since: DateTime!) {
  user(login: $login) {
    contributionsCollection(from: $since) {
      pullRequestContributions(first: 100, after: $cursor) {
        nodes {
          pullRequest {
            title
            number
            repository { nameWithOwner }
            createdAt
            updatedAt
            mergedAt
            closedAt
            isDraft
            state
            commits(first: 1) { totalCount }
            additions
            deletions
            comments { totalCount }
            reviews { totalCount }
            body
          }
        }
        pageInfo { hasNextPage endCursor }
      }
      pullRequestReviewContributions(first: 100, after: $cursor) {
        nodes {
          pullRequestReview {
            createdAt
            updatedAt
            state
            comments { totalCount }
            repository { nameWithOwner }
            pullRequest {
              number
              title
              author { login }
            }
          }
        }
        pageInfo { hasNextPage endCursor }
      }
      issueContributions(first: 100, after: $cursor) {
        nodes {
          issue {
            title
            number
            repository { nameWithOwner }
            createdAt
            updatedAt
            closedAt
            comments { totalCount }
          }
        }
        pageInfo { hasNextPage endCursor }
      }
      commitContributionsByRepository(maxRepositories: 100) {
        repository { nameWithOwner }
        contributions { totalCount }
      }
    }
  }
}
"""

DEFAULT_BRANCH_HISTORY_QUERY = """
query($owner: String!, $repo: String!, $cursor: String, $since: GitTimestamp!, $authorId: ID!) {
  repository(owner: $owner, name: $repo) {
    defaultBranchRef {
      target {
        ... on Commit {
          history(since: $since, first: 100, after: $cursor, author: {id: $authorId}) {
            nodes {
              messageHeadline
              messageBody
              committedDate
            }
            pageInfo { hasNextPage endCursor }
          }
        }
      }
    }
  }
}
"""

PR_COMMENTS_QUERY = """
query($owner: String!, $repo: String!, $number: Int!, $cursor: String) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      comments(first: 100, after: $cursor) {
        nodes {
          author { login }
          bodyText
          createdAt
          reactionGroups {
            content
            reactors { totalCount }
          }
        }
        pageInfo { hasNextPage endCursor }
      }
    }
  }
}
"""

PR_REVIEWS_QUERY = """
query($owner: String!, $repo: String!, $number: Int!, $cursor: String) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      reviews(first: 100, after: $cursor) {
        nodes {
          author { login }
          state
          createdAt
          comments(first: 100) {
            nodes {
              bodyText
              path
              position
              diffHunk
              createdAt
            }
          }
        }
        pageInfo { hasNextPage endCursor }
      }
    }
  }
}
"""

PR_CHANGED_FILES_QUERY = """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      files(first: 100) {
        nodes {
          path
          additions
          deletions
          changeType
        }
      }
    }
  }
}
"""

PR_TIMELINE_QUERY = """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      timelineItems(first: 100, itemTypes: [READY_FOR_REVIEW_EVENT, REVIEW_REQUESTED_EVENT, MERGED_EVENT]) {
        nodes {
          __typename
          ... on ReadyForReviewEvent {
            actor { login }
            createdAt
          }
          ... on ReviewRequestedEvent {
            actor { login }
            createdAt
            requestedReviewer {
              ... on User { login }
            }
          }
          ... on MergedEvent {
            actor { login }
            createdAt
            commit { oid }
          }
        }
      }
    }
  }
}
"""

REPO_INFO_QUERY = """
query($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    description
    repositoryTopics(first: 10) {
      nodes {
        topic { name }
      }
    }
  }
}
"""

USER_ID_QUERY = """
query($login: String!) {
  user(login: $login) {
    id
  }
}
"""
