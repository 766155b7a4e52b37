"""GraphQL documents sent to the GitHub API v4."""

ISSUES_PAGE_SIZE = 5
REACTIONS_PER_ISSUE = 3

GET_ISSUES_OF_REPOSITORY = f"""
  query ($organization: String!, $repository: String!, $cursor: String) {{
    organization(login: $organization) {{
      name
      url
      repository(name: $repository) {{
        name
        url
        issues(first: {ISSUES_PAGE_SIZE}, after: $cursor, states: [OPEN]) {{
          edges {{
            node {{
              id
              title
              url
              reactions(last: {REACTIONS_PER_ISSUE}) {{
                edges {{
                  node {{
                    id
                    content
                  }}
                }}
              }}
            }}
          }}
          totalCount
          pageInfo {{
            endCursor
            hasNextPage
          }}
        }}
      }}
    }}
  }}
"""
